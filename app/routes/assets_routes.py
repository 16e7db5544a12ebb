"""
Asset routes.

Read-only access to asset records. Assets are created and modified only
by the minting pipeline (`POST /mint`).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from app.models.asset import AssetStatus
from app.schemas.asset import AssetResponse
from app.services.assets_service import AssetRegistry, get_asset_registry

router = APIRouter()


@router.get("/by-owner/{owner_id}", response_model=List[AssetResponse])
async def list_assets_by_owner(
    owner_id: str,
    status: Optional[AssetStatus] = None,
    registry: AssetRegistry = Depends(get_asset_registry),
):
    """
    Retrieve the assets of a user, newest first.

    Args:
        owner_id (str): Identifier of the owning user.
        status (AssetStatus, optional): Only return assets in this status.

    Example:
        >>> GET /assets/by-owner/user-1?status=minted
    """

    assets = await registry.list_by_owner(owner_id, status)
    return [AssetResponse(**asset.model_dump()) for asset in assets]


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset_route(asset_id: str, registry: AssetRegistry = Depends(get_asset_registry)):
    """
    Retrieve an asset by id.

    Example:
        >>> GET /assets/665f1c2e9b1e8a0f5c3d2a10
    """

    asset = await registry.get(asset_id)
    return AssetResponse(**asset.model_dump())
