"""
Provider helpers.

Utility functions shared by the OpenAI and Verbwire adapters.

Responsibilities:
    - Map internal chain identifiers to the minting provider's chain names.
    - Validate and return the API key configured for a provider.
    - Extract IPFS locators from storage responses.
    - Build image filenames and decode inline `data:` image URLs.
"""

import base64
import binascii
import logging
import re
from typing import Optional, Tuple, Type

from app.core.errors import PipelineError

logger = logging.getLogger(__name__)

CHAIN_MAPPING = {
    "polygon-amoy": "polygon-amoy",
    "ethereum-sepolia": "sepolia",
    "base-sepolia": "base-sepolia",
}
"""Internal chain identifier -> Verbwire chain name."""

DEFAULT_PROVIDER_CHAIN = "polygon-amoy"

SUPPORTED_CHAINS = tuple(CHAIN_MAPPING)

_DATA_URL_REGEX = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)


def get_provider_chain(chain: str) -> str:
    """
    Returns the minting provider's name for an internal chain identifier.

    Unmapped identifiers fall back to `DEFAULT_PROVIDER_CHAIN` instead of
    failing.

    Args:
        chain (str): Internal chain identifier (e.g., "ethereum-sepolia").

    Returns:
        str: Provider chain name (e.g., "sepolia").
    """

    provider_chain = CHAIN_MAPPING.get(chain)
    if provider_chain is None:
        logger.warning("Unmapped chain %r, falling back to %s", chain, DEFAULT_PROVIDER_CHAIN)
        return DEFAULT_PROVIDER_CHAIN
    return provider_chain


def get_api_key(api_key: Optional[str], provider: str, error_cls: Type[PipelineError]) -> str:
    """
    Returns the API key configured for a provider.

    Args:
        api_key (str): Configured key, possibly empty.
        provider (str): Provider name used in the error message.
        error_cls: Domain error raised when the key is missing.

    Raises:
        PipelineError: `error_cls` if the API key is missing or empty.

    Returns:
        str: API key string.
    """

    if not api_key:
        raise error_cls(f"{provider} API key not configured")
    return api_key


def extract_ipfs_url(payload: dict) -> Optional[str]:
    """Returns `ipfs_storage.ipfs_url`, else the top-level `ipfs_url`."""
    storage = payload.get("ipfs_storage")
    if isinstance(storage, dict) and storage.get("ipfs_url"):
        return storage["ipfs_url"]
    return payload.get("ipfs_url") or None


def image_filename(name: str, extension: str = "webp") -> str:
    """
    Builds the upload filename for an image from the asset name.

    Example:
        >>> image_filename("Neon Dreams #1")
        'Neon_Dreams__1.webp'
    """
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', name)}.{extension}"


def is_data_url(source: str) -> bool:
    return source.startswith("data:")


def decode_data_url(source: str) -> Tuple[str, bytes]:
    """
    Decodes a base64 `data:` URL.

    Returns:
        tuple: `(mime_type, raw_bytes)`.

    Raises:
        ValueError: If the URL is not a base64 data URL.
    """
    match = _DATA_URL_REGEX.match(source)
    if not match:
        raise ValueError("not a base64 data URL")
    try:
        return match.group("mime"), base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
