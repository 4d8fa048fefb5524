"""
Input validation utilities.
Validates externally supplied document keys before they reach the resolver.
"""

from typing import List, Optional

from shared_utils.error_handler import ValidationError


# Characters that would make ``key + extension`` leave the flat cache directory
_FORBIDDEN_KEY_CHARS = ("/", "\\", "\x00")


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def first_value(values: List[str]) -> Optional[str]:
        """Return the first occurrence of a repeated query parameter.

        Args:
            values: All values supplied for the parameter, in request order

        Returns:
            The first value, or None if the parameter was absent
        """
        return values[0] if values else None

    @staticmethod
    def validate_document_key(value: Optional[str], field_name: str = "key") -> str:
        """Validate a document key.

        The key is used verbatim as a filename stem, so it is not stripped
        or normalized. It must be non-empty and must name an entry directly
        inside the cache directory.

        Args:
            value: Raw key from the request (None when absent)
            field_name: Name of field for error messages

        Returns:
            The key, unchanged

        Raises:
            ValidationError: If the key is missing, empty or not a plain name
        """
        if value is None:
            raise ValidationError(f"{field_name} is required")

        if not value:
            raise ValidationError(f"{field_name} cannot be empty")

        if any(c in value for c in _FORBIDDEN_KEY_CHARS):
            raise ValidationError(
                f"{field_name} must be a plain file name",
                context={field_name: value},
            )

        return value
