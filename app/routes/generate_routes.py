"""
Generation routes.

Preview endpoints that run the generative steps of the pipeline without
persisting or minting anything.
"""

from fastapi import APIRouter

from app.core.errors import ValidationError
from app.schemas.mint import (
    ImageGenerationRequest,
    ImageGenerationResponse,
    MetadataGenerationRequest,
    MetadataGenerationResponse,
)
from app.services.image_service import ImageService
from app.services.metadata_service import MetadataSynthesizer, PriceEstimator

router = APIRouter()


@router.post("/image", response_model=ImageGenerationResponse)
async def generate_image_route(request: ImageGenerationRequest):
    """
    Generate an image for a prompt.

    Returns:
        ImageGenerationResponse: Image URL or base64 data URL.
    """

    if not request.prompt.strip():
        raise ValidationError("Prompt is required")
    image_url = await ImageService().generate(request.prompt.strip())
    return ImageGenerationResponse(image_url=image_url)


@router.post("/metadata", response_model=MetadataGenerationResponse)
async def generate_metadata_route(request: MetadataGenerationRequest):
    """
    Generate metadata and a price suggestion for a prompt.

    Malformed model output is replaced by the fallback metadata and price.
    """

    if not request.prompt.strip():
        raise ValidationError("Prompt is required")
    metadata = await MetadataSynthesizer().synthesize(request.prompt.strip(), request.image_url)
    price = await PriceEstimator().estimate(metadata)
    return MetadataGenerationResponse(**metadata.model_dump(), price_suggestion=price)
