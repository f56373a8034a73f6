"""FastAPI dependencies for API authentication."""

from typing import Annotated

from fastapi import Header, HTTPException

from marketplace_catalog.auth.api_key_validator import APIKeyValidator


def get_api_key_from_header(
    validator: APIKeyValidator,
    x_api_key: Annotated[str | None, Header()] = None,
) -> str:
    """Extract and validate the API key from the X-API-Key header.

    Args:
        validator: Validator holding the configured keys
        x_api_key: API key from X-API-Key header (injected by FastAPI)

    Returns:
        str: The validated API key

    Raises:
        HTTPException: 401 if API key is missing or invalid
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
