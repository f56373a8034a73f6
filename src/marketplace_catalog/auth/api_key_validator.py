"""API key validation for callers of the catalog API.

Callers are trusted services (the storefront backend, the database webhook)
that present one of the configured keys in the X-API-Key header. The viewer id
they forward is only honoured behind that check.
"""

import hmac


def parse_api_keys(raw: str | None) -> list[str]:
    """Split a comma-separated key list, dropping blanks and surrounding whitespace."""
    return [key.strip() for key in (raw or "").split(",") if key.strip()]


class APIKeyValidator:
    """Validates API keys presented by catalog callers."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with list of valid API keys.

        Args:
            api_keys: List of valid API key strings

        Raises:
            ValueError: If api_keys list is empty
        """
        if not api_keys:
            raise ValueError("At least one API key must be provided")

        self._keys = [key.encode() for key in set(api_keys)]

    def validate(self, api_key: str) -> bool:
        """Validate an API key in constant time per configured key.

        Args:
            api_key: The API key to validate

        Returns:
            bool: True if valid, False otherwise
        """
        candidate = api_key.encode()
        matched = False
        for key in self._keys:
            matched |= hmac.compare_digest(candidate, key)
        return matched
