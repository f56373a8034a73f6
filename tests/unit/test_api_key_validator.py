"""Unit tests for caller API key validation."""

import pytest

from marketplace_catalog.auth.api_key_validator import APIKeyValidator, parse_api_keys


@pytest.mark.unit
class TestParseApiKeys:
    """Test suite for parse_api_keys."""

    def test_splits_and_strips(self) -> None:
        """Test that a comma-separated value becomes a clean key list."""
        assert parse_api_keys(" storefront-key , webhook-key,,") == [
            "storefront-key",
            "webhook-key",
        ]

    @pytest.mark.parametrize("raw", [None, "", " , "])
    def test_blank_values_give_no_keys(self, raw) -> None:
        """Test that unset or blank configuration yields no keys."""
        assert parse_api_keys(raw) == []


@pytest.mark.unit
class TestAPIKeyValidator:
    """Test suite for APIKeyValidator."""

    def test_empty_key_list_raises_error(self) -> None:
        """Test that a validator without keys cannot be built."""
        with pytest.raises(ValueError, match="At least one API key must be provided"):
            APIKeyValidator(api_keys=[])

    def test_accepts_any_configured_key(self) -> None:
        """Test that each configured caller key is accepted."""
        validator = APIKeyValidator(api_keys=["storefront-key", "webhook-key"])

        assert validator.validate("storefront-key") is True
        assert validator.validate("webhook-key") is True
        assert validator.validate("other-key") is False

    def test_rejects_empty_key(self) -> None:
        """Test that an empty string is never valid."""
        validator = APIKeyValidator(api_keys=["storefront-key"])

        assert validator.validate("") is False

    def test_is_case_and_whitespace_sensitive(self) -> None:
        """Test that keys must match exactly."""
        validator = APIKeyValidator(api_keys=["StoreFront"])

        assert validator.validate("storefront") is False
        assert validator.validate(" StoreFront") is False
        assert validator.validate("StoreFront") is True

    def test_non_ascii_key_is_rejected(self) -> None:
        """Test that non-ASCII header values are compared rather than raising."""
        validator = APIKeyValidator(api_keys=["storefront-key"])

        assert validator.validate("storefront-kéy") is False
