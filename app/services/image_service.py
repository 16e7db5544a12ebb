"""
Image generation service.

Turns a prompt into a rendered image through the OpenAI Images API. The
image is returned as a reference: either a fetchable URL or an inline
`data:image/webp;base64,...` URL when the model returns raw bytes.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.errors import GenerationError
from app.util.provider_helpers import get_api_key
from app.util.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gpt-image-1"
PROMPT_SUFFIX = ", high quality digital art, vibrant colors, detailed, ultra high resolution"


class ImageService:
    """
    Client for the OpenAI Images API.

    Args:
        api_key (str): OpenAI API key.
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
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.OPENAI_BASE_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=settings.HTTP_MAX_ATTEMPTS)
        self.transport = transport

    async def generate(self, prompt: str) -> str:
        """
        Generates an image for a prompt.

        Args:
            prompt (str): Non-empty user prompt.

        Returns:
            str: Image URL or base64 data URL.

        Raises:
            GenerationError: If the key is missing, the request fails or the
            response carries no image.
        """

        api_key = get_api_key(self.api_key, "OpenAI", GenerationError)
        payload = {
            "model": IMAGE_MODEL,
            "prompt": f"{prompt}{PROMPT_SUFFIX}",
            "n": 1,
            "size": "1024x1024",
            "quality": "high",
            "output_format": "webp",
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        async def _request() -> dict:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = await client.post("/images/generations", json=payload, headers=headers)
                response.raise_for_status()
                return response.json()

        logger.info("Generating image for prompt: %s", prompt)
        try:
            data = await call_with_retry(_request, self.retry_policy, description="image generation")
        except httpx.HTTPStatusError as e:
            raise GenerationError(f"Image generation failed: {e.response.text}") from e
        except httpx.RequestError as e:
            raise GenerationError(f"Connection error to image provider: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Invalid response from image provider: {e}") from e

        try:
            item = data["data"][0]
        except (KeyError, IndexError, TypeError):
            raise GenerationError("Image provider returned no image")
        if not isinstance(item, dict):
            raise GenerationError("Image provider returned no image")

        if item.get("b64_json"):
            return f"data:image/webp;base64,{item['b64_json']}"
        if item.get("url"):
            return item["url"]
        raise GenerationError("Image provider returned no image")
