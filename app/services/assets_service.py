"""
Assets service.

This module defines the asset registry: the durable record of every
minting pipeline run and the single source of truth for its status.

The registry is backed by the `nft_assets` MongoDB collection. Records are
created once, in status `minting`, and afterwards only modified through
partial `$set` updates, so fields written by earlier steps are never lost.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.errors import AssetNotFoundError, PersistenceError
from app.db.client import ASSETS_COLLECTION, get_db
from app.models.asset import Asset, AssetDraft, AssetStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _object_id(asset_id: str) -> ObjectId:
    try:
        return ObjectId(asset_id)
    except (InvalidId, TypeError):
        raise AssetNotFoundError(f"Asset {asset_id} not found")


def _to_asset(document: dict) -> Asset:
    document = dict(document)
    document["id"] = str(document.pop("_id"))
    return Asset.model_validate(document)


class AssetRegistry:
    """
    Asset registry over a MongoDB database.

    Args:
        db (AsyncIOMotorDatabase): Database holding the `nft_assets` collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[ASSETS_COLLECTION]

    async def create(self, draft: AssetDraft) -> Asset:
        """
        Persists a new asset in status `minting`.

        Args:
            draft (AssetDraft): Provenance and generated content of the asset.

        Returns:
            Asset: The stored asset, with its id and timestamps.

        Raises:
            PersistenceError: If the store rejects the write.
        """

        now = _utcnow()
        document = draft.model_dump(mode="json")
        document.update(
            {
                "ipfs_image_uri": None,
                "ipfs_metadata_uri": None,
                "token_id": None,
                "contract_address": None,
                "tx_hash": None,
                "status": AssetStatus.MINTING.value,
                "created_at": now,
                "updated_at": now,
            }
        )

        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to create asset record: {e}") from e

        document["_id"] = result.inserted_id
        return _to_asset(document)

    async def update(self, asset_id: str, fields: dict) -> None:
        """
        Merges `fields` into an existing asset and refreshes `updated_at`.

        Only the given fields are written; everything else keeps its last
        value.

        Raises:
            AssetNotFoundError: If no asset has this id.
            PersistenceError: If the store rejects the write.
        """

        changes = {key: value.value if isinstance(value, AssetStatus) else value for key, value in fields.items()}
        changes["updated_at"] = _utcnow()

        try:
            result = await self.collection.update_one({"_id": _object_id(asset_id)}, {"$set": changes})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to update asset {asset_id}: {e}", asset_id=asset_id) from e

        if result.matched_count == 0:
            raise AssetNotFoundError(f"Asset {asset_id} not found", asset_id=asset_id)

    async def get(self, asset_id: str) -> Asset:
        """
        Retrieves an asset by id.

        Raises:
            AssetNotFoundError: If the id is unknown or malformed.
            PersistenceError: If the store is unreachable.
        """

        try:
            document = await self.collection.find_one({"_id": _object_id(asset_id)})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read asset {asset_id}: {e}") from e

        if not document:
            raise AssetNotFoundError(f"Asset {asset_id} not found")
        return _to_asset(document)

    async def list_by_owner(self, owner_id: str, status: Optional[AssetStatus] = None, limit: int = 100) -> list[Asset]:
        """Returns the assets of an owner, newest first, optionally filtered by status."""

        query = {"owner_id": owner_id}
        if status is not None:
            query["status"] = status.value

        try:
            documents = await self.collection.find(query).sort("created_at", -1).to_list(length=limit)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to list assets: {e}") from e

        return [_to_asset(document) for document in documents]


def get_asset_registry() -> AssetRegistry:
    """FastAPI dependency returning a registry bound to the global database."""
    return AssetRegistry(get_db())
