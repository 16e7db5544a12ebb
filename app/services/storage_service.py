"""
IPFS storage service.

Pins images and NFT metadata documents to IPFS through the Verbwire
storage API and returns their `ipfs://` locators.

The metadata document has a fixed shape (see `build_metadata_document`)
that minting providers and marketplaces read; it must not change.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.errors import UploadError
from app.models.asset import NFTMetadata
from app.util.provider_helpers import decode_data_url, extract_ipfs_url, get_api_key, is_data_url
from app.util.retry import RetryPolicy, call_with_retry


logger = logging.getLogger(__name__)


def build_metadata_document(metadata: NFTMetadata, image_locator: str) -> dict:
    """
    Builds the metadata document pinned next to the image.

    Args:
        metadata (NFTMetadata): Synthesized metadata.
        image_locator (str): Locator returned by the image upload.

    Returns:
        dict: `{name, description, image, attributes, external_url,
        background_color, animation_url}`.
    """

    return {
        "name": metadata.name,
        "description": metadata.description,
        "image": image_locator,
        "attributes": [attribute.model_dump() for attribute in metadata.attributes],
        "external_url": "",
        "background_color": "",
        "animation_url": "",
    }


class StorageUploader:
    """
    Client for the Verbwire IPFS storage endpoints.

    Args:
        api_key (str): Verbwire API key.
        base_url (str): API base URL.
        timeout (float): Timeout applied to each request, in seconds.
        retry_policy (RetryPolicy): Policy for transient failures.
        transport: Optional `httpx` transport (used by tests).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.VERBWIRE_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.VERBWIRE_BASE_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=settings.HTTP_MAX_ATTEMPTS)
        self.transport = transport

    async def upload_image(self, source: str, filename: str) -> str:
        """
        Pins an image to IPFS.

        Args:
            source (str): Image URL, or a base64 `data:` URL with the image bytes.
            filename (str): Filename stored with the content.

        Returns:
            str: IPFS locator of the image.

        Raises:
            UploadError: If the upload fails or returns no locator.
        """

        if is_data_url(source):
            try:
                mime_type, raw = decode_data_url(source)
            except ValueError as e:
                raise UploadError(f"Invalid inline image: {e}") from e
            request_kwargs = {"files": {"filePath": (filename, raw, mime_type)}}
        else:
            request_kwargs = {"json": {"filePath": source, "fileName": filename}}

        logger.info("Uploading image %s to IPFS", filename)
        locator = await self._post("/nft/store/file", "image", **request_kwargs)
        logger.info("Image uploaded to IPFS: %s", locator)
        return locator

    async def upload_metadata_document(self, document: dict) -> str:
        """
        Pins a metadata document to IPFS.

        Returns:
            str: IPFS locator of the document.

        Raises:
            UploadError: If the upload fails or returns no locator.
        """

        logger.info("Uploading metadata to IPFS")
        locator = await self._post("/nft/store/metadata", "metadata", json=document)
        logger.info("Metadata uploaded to IPFS: %s", locator)
        return locator

    async def _post(self, path: str, label: str, **request_kwargs) -> str:
        api_key = get_api_key(self.api_key, "Verbwire", UploadError)
        headers = {"X-API-Key": api_key}

        async def _request() -> dict:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(path, headers=headers, **request_kwargs)
                response.raise_for_status()
                return response.json()

        try:
            data = await call_with_retry(_request, self.retry_policy, description=f"IPFS {label} upload")
        except httpx.HTTPStatusError as e:
            logger.error("IPFS %s upload error: %s", label, e.response.text)
            raise UploadError(f"Failed to upload {label} to IPFS") from e
        except httpx.RequestError as e:
            raise UploadError(f"Connection error to IPFS storage: {e}") from e
        except ValueError as e:
            raise UploadError(f"Invalid response from IPFS storage: {e}") from e

        locator = extract_ipfs_url(data) if isinstance(data, dict) else None
        if not locator:
            raise UploadError(f"IPFS storage returned no locator for {label}")
        return locator
