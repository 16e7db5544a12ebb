"""
Listing routes.

Marketplace listings of minted assets.
"""

from typing import List

from fastapi import APIRouter

from app.schemas.listing import ListingCreate, ListingResponse
from app.services.listings_service import (
    cancel_listing,
    create_listing,
    get_listing,
    list_active_listings,
)

router = APIRouter()


@router.post("", status_code=201, response_model=ListingResponse)
async def create_listing_route(data: ListingCreate):
    """
    List a minted asset for sale.

    Example:
        >>> POST /listings
        {
            "nft_id": "665f1c2e9b1e8a0f5c3d2a10",
            "seller_id": "user-1",
            "seller_address": "0x1234...",
            "price": 0.05,
            "currency": "MATIC"
        }
    """

    listing = await create_listing(data)
    return ListingResponse(**listing.model_dump())


@router.get("", response_model=List[ListingResponse])
async def list_listings_route():
    """Retrieve all active listings, newest first."""

    return [ListingResponse(**listing.model_dump()) for listing in await list_active_listings()]


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing_route(listing_id: str):
    listing = await get_listing(listing_id)
    return ListingResponse(**listing.model_dump())


@router.delete("/{listing_id}", response_model=ListingResponse)
async def cancel_listing_route(listing_id: str, seller_id: str):
    """
    Cancel an active listing. Only the seller may cancel it.

    Example:
        >>> DELETE /listings/665f1c2e9b1e8a0f5c3d2a11?seller_id=user-1
    """

    listing = await cancel_listing(listing_id, seller_id)
    return ListingResponse(**listing.model_dump())
