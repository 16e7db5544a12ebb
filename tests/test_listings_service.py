"""Tests for marketplace listings."""

from __future__ import annotations

import pytest

from app.core.errors import AssetNotFoundError, ListingError, PersistenceError
from app.db.client import LISTINGS_COLLECTION
from app.models.asset import AssetDraft, AssetStatus
from app.schemas.listing import ListingCreate
from app.services import listings_service


@pytest.fixture(autouse=True)
def patch_db(monkeypatch, fake_db):
    monkeypatch.setattr(listings_service, "get_db", lambda: fake_db)


async def _asset(registry, status: AssetStatus, owner_id: str = "user-1") -> str:
    asset = await registry.create(
        AssetDraft(
            owner_id=owner_id,
            owner_address="0x1234",
            prompt="neon city",
            ai_image_url="https://images.example/neon.webp",
            name="Neon Dreams",
            description="A glowing city",
            chain="polygon-amoy",
        )
    )
    if status != AssetStatus.MINTING:
        await registry.update(asset.id, {"status": status})
    return asset.id


def _listing(nft_id: str, seller_id: str = "user-1") -> ListingCreate:
    return ListingCreate(nft_id=nft_id, seller_id=seller_id, seller_address="0x1234", price=0.05)


class TestCreateListing:
    @pytest.mark.asyncio
    async def test_minted_asset_can_be_listed(self, registry) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED)

        listing = await listings_service.create_listing(_listing(asset_id))

        assert listing.nft_id == asset_id
        assert listing.status == "active"
        assert listing.currency == "MATIC"
        assert [l.id for l in await listings_service.list_active_listings()] == [listing.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AssetStatus.MINTING, AssetStatus.FAILED])
    async def test_unminted_asset_cannot_be_listed(self, registry, status) -> None:
        asset_id = await _asset(registry, status)
        with pytest.raises(ListingError):
            await listings_service.create_listing(_listing(asset_id))

    @pytest.mark.asyncio
    async def test_only_owner_can_list(self, registry) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED, owner_id="user-2")
        with pytest.raises(ListingError):
            await listings_service.create_listing(_listing(asset_id))

    @pytest.mark.asyncio
    async def test_unknown_asset(self) -> None:
        with pytest.raises(AssetNotFoundError):
            await listings_service.create_listing(_listing("665f1c2e9b1e8a0f5c3d2a10"))


class TestCancelListing:
    @pytest.mark.asyncio
    async def test_seller_cancels_listing(self, registry) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED)
        listing = await listings_service.create_listing(_listing(asset_id))

        cancelled = await listings_service.cancel_listing(listing.id, "user-1")

        assert cancelled.status == "cancelled"
        assert (await listings_service.get_listing(listing.id)).status == "cancelled"
        assert await listings_service.list_active_listings() == []

    @pytest.mark.asyncio
    async def test_other_user_cannot_cancel(self, registry) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED)
        listing = await listings_service.create_listing(_listing(asset_id))

        with pytest.raises(ListingError):
            await listings_service.cancel_listing(listing.id, "user-2")

    @pytest.mark.asyncio
    async def test_unknown_listing(self) -> None:
        with pytest.raises(AssetNotFoundError):
            await listings_service.get_listing("missing")

    @pytest.mark.asyncio
    async def test_listing_cancelled_concurrently_is_not_cancelled_twice(self, registry, fake_db, monkeypatch) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED)
        listing = await listings_service.create_listing(_listing(asset_id))
        await listings_service.cancel_listing(listing.id, "user-1")

        async def stale_listing(listing_id):
            return listing

        monkeypatch.setattr(listings_service, "get_listing", stale_listing)

        with pytest.raises(ListingError, match="no longer active"):
            await listings_service.cancel_listing(listing.id, "user-1")


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_get_listing_wraps_store_error(self, fake_db) -> None:
        fake_db[LISTINGS_COLLECTION].fail_on.add("find_one")
        with pytest.raises(PersistenceError):
            await listings_service.get_listing("665f1c2e9b1e8a0f5c3d2a10")

    @pytest.mark.asyncio
    async def test_list_active_listings_wraps_store_error(self, fake_db) -> None:
        fake_db[LISTINGS_COLLECTION].fail_on.add("find")
        with pytest.raises(PersistenceError):
            await listings_service.list_active_listings()

    @pytest.mark.asyncio
    async def test_cancel_wraps_store_error(self, registry, fake_db) -> None:
        asset_id = await _asset(registry, AssetStatus.MINTED)
        listing = await listings_service.create_listing(_listing(asset_id))
        fake_db[LISTINGS_COLLECTION].fail_on.add("update_one")

        with pytest.raises(PersistenceError) as excinfo:
            await listings_service.cancel_listing(listing.id, "user-1")

        assert excinfo.value.asset_id == asset_id
        assert (await listings_service.get_listing(listing.id)).status == "active"
