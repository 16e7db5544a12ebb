"""
Mint routes.

This module exposes the minting pipeline: one request runs the whole
prompt -> image -> metadata -> IPFS -> chain sequence and returns either
the minted token or a structured error.
"""

from fastapi import APIRouter, Depends

from app.models.mint import MintRequest
from app.schemas.mint import ErrorResponse, MintResponse
from app.services.pipeline_service import MintPipeline, get_pipeline

router = APIRouter()


@router.post(
    "",
    status_code=201,
    response_model=MintResponse,
    responses={
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def mint_route(request: MintRequest, pipeline: MintPipeline = Depends(get_pipeline)):
    """
    Create and mint an NFT from a prompt.

    Errors raised after the asset record was created include its
    `asset_id`, whose status is then `failed` (or still `minting` if the
    final update could not be written).

    Example:
        >>> POST /mint
        {
            "prompt": "neon city",
            "chain": "polygon-amoy",
            "wallet_address": "0x1234...",
            "user_id": "user-1"
        }
    """

    result = await pipeline.run(request)
    return MintResponse(**result.model_dump())
