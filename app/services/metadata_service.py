"""
Metadata and price synthesis.

Both services ask an OpenAI chat model for a JSON object and decode the
completion through a Pydantic model. Malformed output is expected from a
language model: instead of failing the pipeline, a deterministic fallback
value is substituted.

    - MetadataSynthesizer: prompt -> name, description, attributes.
    - PriceEstimator: metadata -> suggested price range. Never raises.
"""

import json
import logging
import re
from typing import Optional

import httpx
import pydantic

from app.core.config import settings
from app.core.errors import GenerationError
from app.models.asset import Attribute, NFTMetadata, PriceEstimate
from app.util.provider_helpers import get_api_key
from app.util.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

METADATA_MODEL = "gpt-4.1-2025-04-14"
PRICE_MODEL = "gpt-4.1-mini-2025-04-14"

METADATA_SYSTEM_PROMPT = """You are an expert NFT metadata generator. Create compelling NFT metadata based on the user's prompt. Return ONLY a valid JSON object with the following structure:
{
  "name": "Creative NFT Title (max 50 chars)",
  "description": "Detailed description (max 200 chars)",
  "attributes": [
    {"trait_type": "Style", "value": "..."},
    {"trait_type": "Color Palette", "value": "..."},
    {"trait_type": "Mood", "value": "..."},
    {"trait_type": "Rarity", "value": "Common|Rare|Epic|Legendary"},
    {"trait_type": "Theme", "value": "..."}
  ]
}

Make it creative and engaging for NFT collectors. The name should be catchy and the description should be detailed but concise."""

PRICE_SYSTEM_PROMPT = """You are an NFT pricing expert. Analyze the metadata and suggest pricing in MATIC for Polygon network. Return ONLY a JSON object:
{
  "min": 0.01,
  "mid": 0.05,
  "max": 0.1,
  "currency": "MATIC"
}
Base prices on rarity, style, and theme. Common: 0.01-0.05, Rare: 0.05-0.2, Epic: 0.2-0.5, Legendary: 0.5-2.0"""

FALLBACK_NAME = "AI Generated Art"

FALLBACK_PRICE = PriceEstimate(min=0.01, mid=0.05, max=0.1, currency="MATIC")

_CODE_FENCE_REGEX = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


class MalformedResponse(ValueError):
    """The completion could not be decoded into the expected model."""


def fallback_metadata(prompt: str) -> NFTMetadata:
    """Deterministic metadata used when the model output is unusable."""
    return NFTMetadata(
        name=FALLBACK_NAME,
        description=f"Created with AI from the prompt: {prompt}",
        attributes=[
            Attribute(trait_type="Style", value="AI Generated"),
            Attribute(trait_type="Rarity", value="Common"),
            Attribute(trait_type="Theme", value="Digital Art"),
        ],
    )


def _parse_json_object(content: Optional[str]) -> dict:
    if not isinstance(content, str):
        raise MalformedResponse("completion has no text content")
    text = content.strip()
    match = _CODE_FENCE_REGEX.match(text)
    if match:
        text = match.group("body")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"completion is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponse("completion is not a JSON object")
    return data


def decode_metadata(content: Optional[str]) -> NFTMetadata:
    """
    Decodes a metadata completion.

    Raises:
        MalformedResponse: If the text is not a JSON object matching `NFTMetadata`.
    """
    data = _parse_json_object(content)
    try:
        return NFTMetadata.model_validate(data)
    except pydantic.ValidationError as e:
        raise MalformedResponse(str(e)) from e


def decode_price(content: Optional[str]) -> PriceEstimate:
    """
    Decodes a price completion, enforcing `min <= mid <= max`.

    Raises:
        MalformedResponse: If the text is not a valid price estimate.
    """
    data = _parse_json_object(content)
    try:
        return PriceEstimate.model_validate(data)
    except pydantic.ValidationError as e:
        raise MalformedResponse(str(e)) from e


def _completion_text(payload: dict) -> Optional[str]:
    try:
        return payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


class _ChatCompletionClient:
    """Shared plumbing for OpenAI chat completion calls."""

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

    async def _complete(self, model: str, system: str, user: str, max_tokens: int) -> Optional[str]:
        """
        Runs one chat completion and returns the message text.

        Raises:
            GenerationError: If the API key is missing.
            httpx.HTTPError: If the request fails after retries.
        """
        api_key = get_api_key(self.api_key, "OpenAI", GenerationError)
        payload = {
            "model": model,
            "max_completion_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        async def _request() -> dict:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = await client.post("/chat/completions", json=payload, headers=headers)
                response.raise_for_status()
                return response.json()

        try:
            data = await call_with_retry(_request, self.retry_policy, description=f"{model} completion")
        except ValueError:
            # Body was not JSON at all
            return None
        return _completion_text(data) if isinstance(data, dict) else None


class MetadataSynthesizer(_ChatCompletionClient):
    """
    Produces the name, description and attributes of an asset.

    A completion that is not a well-formed metadata object is replaced by
    `fallback_metadata(prompt)`. Failing to reach the model at all is a
    `GenerationError`.
    """

    async def synthesize(self, prompt: str, image_ref: Optional[str] = None) -> NFTMetadata:
        logger.info("Generating metadata for prompt: %s", prompt)
        try:
            content = await self._complete(
                METADATA_MODEL,
                METADATA_SYSTEM_PROMPT,
                f'Generate NFT metadata for this prompt: "{prompt}"',
                max_tokens=500,
            )
        except httpx.HTTPStatusError as e:
            raise GenerationError(f"Metadata generation failed: {e.response.text}") from e
        except httpx.RequestError as e:
            raise GenerationError(f"Connection error to metadata provider: {e}") from e

        try:
            return decode_metadata(content)
        except MalformedResponse as e:
            logger.warning("Malformed metadata from model, using fallback: %s", e)
            return fallback_metadata(prompt)


class PriceEstimator(_ChatCompletionClient):
    """
    Suggests a price range for synthesized metadata.

    Pricing is an enhancement: every failure yields `FALLBACK_PRICE`.
    """

    async def estimate(self, metadata: NFTMetadata) -> PriceEstimate:
        try:
            content = await self._complete(
                PRICE_MODEL,
                PRICE_SYSTEM_PROMPT,
                f"Price this NFT: {metadata.model_dump_json()}",
                max_tokens=200,
            )
            return decode_price(content)
        except (GenerationError, httpx.HTTPError, MalformedResponse) as e:
            logger.warning("Using fallback pricing: %s", e)
            return FALLBACK_PRICE
