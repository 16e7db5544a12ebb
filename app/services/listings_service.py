"""
Listings service.

Marketplace listings for minted assets. A listing can only be created by
the owner of an asset whose pipeline run reached `minted`.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from app.core.errors import AssetNotFoundError, ListingError, PersistenceError
from app.db.client import LISTINGS_COLLECTION, get_db
from app.models.asset import AssetStatus
from app.models.listing import Listing
from app.schemas.listing import ListingCreate
from app.services.assets_service import AssetRegistry

logger = logging.getLogger(__name__)


def _to_listing(document: dict) -> Listing:
    document = dict(document)
    document["id"] = str(document.pop("_id"))
    return Listing.model_validate(document)


def _listing_filter(listing_id: str) -> dict:
    try:
        return {"_id": ObjectId(listing_id)}
    except (InvalidId, TypeError):
        raise AssetNotFoundError(f"Listing {listing_id} not found")


async def create_listing(data: ListingCreate) -> Listing:
    """
    Lists a minted asset for sale.

    Args:
        data (ListingCreate): Listing request.

    Returns:
        Listing: The stored listing, in status `active`.

    Raises:
        AssetNotFoundError: If the asset does not exist.
        ListingError: If the asset is not minted or not owned by the seller.
    """

    db = get_db()
    asset = await AssetRegistry(db).get(data.nft_id)

    if asset.status != AssetStatus.MINTED:
        raise ListingError(f"Asset {asset.id} is {asset.status.value}, only minted assets can be listed", asset_id=asset.id)
    if asset.owner_id != data.seller_id:
        raise ListingError("Only the owner can list this asset", asset_id=asset.id)

    now = datetime.now(timezone.utc)
    document = data.model_dump()
    document.update({"status": "active", "created_at": now, "updated_at": now})

    try:
        result = await db[LISTINGS_COLLECTION].insert_one(document)
    except PyMongoError as e:
        raise PersistenceError(f"Failed to create listing: {e}", asset_id=asset.id) from e

    document["_id"] = result.inserted_id
    logger.info("Asset %s listed at %s %s", asset.id, data.price, data.currency)
    return _to_listing(document)


async def get_listing(listing_id: str) -> Listing:
    db = get_db()
    try:
        document = await db[LISTINGS_COLLECTION].find_one(_listing_filter(listing_id))
    except PyMongoError as e:
        raise PersistenceError(f"Failed to read listing {listing_id}: {e}") from e
    if not document:
        raise AssetNotFoundError(f"Listing {listing_id} not found")
    return _to_listing(document)


async def list_active_listings(limit: int = 100) -> list[Listing]:
    db = get_db()
    try:
        documents = await db[LISTINGS_COLLECTION].find({"status": "active"}).sort("created_at", -1).to_list(length=limit)
    except PyMongoError as e:
        raise PersistenceError(f"Failed to list listings: {e}") from e
    return [_to_listing(document) for document in documents]


async def cancel_listing(listing_id: str, seller_id: str) -> Listing:
    """
    Cancels an active listing.

    The status change is conditional on the listing still being active, so
    two concurrent cancellations cannot both succeed.

    Raises:
        AssetNotFoundError: If the listing does not exist.
        ListingError: If the caller is not the seller or the listing is not active.
        PersistenceError: If the store is unavailable.
    """

    listing = await get_listing(listing_id)
    if listing.seller_id != seller_id:
        raise ListingError("Only the seller can cancel this listing", asset_id=listing.nft_id)
    if listing.status != "active":
        raise ListingError(f"Listing {listing_id} is already {listing.status}", asset_id=listing.nft_id)

    db = get_db()
    try:
        result = await db[LISTINGS_COLLECTION].update_one(
            {**_listing_filter(listing_id), "seller_id": seller_id, "status": "active"},
            {"$set": {"status": "cancelled", "updated_at": datetime.now(timezone.utc)}},
        )
    except PyMongoError as e:
        raise PersistenceError(f"Failed to cancel listing {listing_id}: {e}", asset_id=listing.nft_id) from e
    if result.matched_count == 0:
        raise ListingError(f"Listing {listing_id} is no longer active", asset_id=listing.nft_id)
    return listing.model_copy(update={"status": "cancelled"})
