"""
Minting schemas.

Schemas:
    - MintResponse: Success payload of `POST /mint`.
    - ErrorResponse: Structured error body returned for any pipeline error.
    - ImageGenerationRequest / ImageGenerationResponse: `POST /generate/image`.
    - MetadataGenerationRequest / MetadataGenerationResponse: `POST /generate/metadata`.
"""

from typing import Optional

from pydantic import BaseModel

from app.models.asset import NFTMetadata, PriceEstimate
from app.models.mint import MintResult


class MintResponse(MintResult):
    pass


class ErrorResponse(BaseModel):
    code: str
    message: str
    asset_id: Optional[str] = None
    """Set when an asset record was created before the failure."""


class ImageGenerationRequest(BaseModel):
    prompt: str


class ImageGenerationResponse(BaseModel):
    image_url: str


class MetadataGenerationRequest(BaseModel):
    prompt: str
    image_url: Optional[str] = None


class MetadataGenerationResponse(NFTMetadata):
    price_suggestion: PriceEstimate
