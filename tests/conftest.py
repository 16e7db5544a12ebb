"""Shared pytest fixtures: an in-memory Motor stand-in and pipeline collaborators."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Optional

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from app.models.asset import Attribute, NFTMetadata, PriceEstimate
from app.models.mint import MintReceipt
from app.services.assets_service import AssetRegistry
from app.services.pipeline_service import MintPipeline

# ============================================================================
# In-memory database
# ============================================================================


def _matches(document: dict, query: dict) -> bool:
    return all(document.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, documents: list[dict]):
        self.documents = documents

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self.documents = sorted(self.documents, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length: Optional[int] = None) -> list[dict]:
        documents = self.documents if length is None else self.documents[:length]
        return [dict(document) for document in documents]


class FakeCollection:
    """Subset of the Motor collection API used by the services.

    Operations listed in `fail_on` raise `PyMongoError`.
    """

    def __init__(self):
        self.documents: dict[ObjectId, dict] = {}
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise PyMongoError(f"{operation} unavailable")

    async def insert_one(self, document: dict):
        self._check("insert_one")
        _id = document.get("_id") or ObjectId()
        self.documents[_id] = dict(document, _id=_id)
        return SimpleNamespace(inserted_id=_id)

    async def find_one(self, query: dict):
        self._check("find_one")
        for document in self.documents.values():
            if _matches(document, query):
                return dict(document)
        return None

    async def update_one(self, query: dict, update: dict):
        self._check("update_one")
        for document in self.documents.values():
            if _matches(document, query):
                document.update(update["$set"])
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    def find(self, query: Optional[dict] = None) -> FakeCursor:
        self._check("find")
        return FakeCursor([dict(d) for d in self.documents.values() if _matches(d, query or {})])

    async def create_index(self, *args, **kwargs):
        return "index"


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def registry(fake_db: FakeDatabase) -> AssetRegistry:
    return AssetRegistry(fake_db)


# ============================================================================
# Pipeline collaborators
# ============================================================================

NEON_METADATA = NFTMetadata(
    name="Neon Dreams",
    description="A glowing city that never sleeps",
    attributes=[
        Attribute(trait_type="Style", value="Cyberpunk"),
        Attribute(trait_type="Rarity", value="Rare"),
    ],
)

NEON_PRICE = PriceEstimate(min=0.05, mid=0.1, max=0.2, currency="MATIC")


class StubImageService:
    def __init__(self, calls: list, result: str = "https://images.example/neon.webp", error: Exception = None):
        self.calls = calls
        self.result = result
        self.error = error

    async def generate(self, prompt: str) -> str:
        self.calls.append(("generate_image", prompt))
        if self.error:
            raise self.error
        return self.result


class StubMetadataSynthesizer:
    def __init__(self, calls: list, result: NFTMetadata = NEON_METADATA):
        self.calls = calls
        self.result = result

    async def synthesize(self, prompt: str, image_ref: str = None) -> NFTMetadata:
        self.calls.append(("synthesize", prompt))
        return self.result


class StubPriceEstimator:
    def __init__(self, calls: list, result: PriceEstimate = NEON_PRICE):
        self.calls = calls
        self.result = result

    async def estimate(self, metadata: NFTMetadata) -> PriceEstimate:
        self.calls.append(("estimate", metadata.name))
        return self.result


class StubUploader:
    def __init__(self, calls: list, image_error: Exception = None, metadata_error: Exception = None):
        self.calls = calls
        self.image_error = image_error
        self.metadata_error = metadata_error
        self.documents: list[dict] = []

    async def upload_image(self, source: str, filename: str) -> str:
        self.calls.append(("upload_image", filename))
        if self.image_error:
            raise self.image_error
        return "ipfs://image-cid"

    async def upload_metadata_document(self, document: dict) -> str:
        self.calls.append(("upload_metadata", document["image"]))
        self.documents.append(document)
        if self.metadata_error:
            raise self.metadata_error
        return "ipfs://metadata-cid"


class StubMinter:
    def __init__(self, calls: list, error: Exception = None):
        self.calls = calls
        self.error = error

    async def mint(self, recipient_address, metadata_uri, name, description, chain) -> MintReceipt:
        self.calls.append(("mint", metadata_uri, chain))
        if self.error:
            raise self.error
        return MintReceipt(token_id="42", contract_address="0xabc", tx_hash="0xdef")


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def make_pipeline(calls, registry):
    """Factory building a pipeline from stubs; keyword arguments replace collaborators."""

    def _make(**overrides) -> MintPipeline:
        collaborators = {
            "image_service": StubImageService(calls),
            "metadata_synthesizer": StubMetadataSynthesizer(calls),
            "price_estimator": StubPriceEstimator(calls),
            "registry": registry,
            "uploader": StubUploader(calls),
            "minter": StubMinter(calls),
        }
        collaborators.update(overrides)
        return MintPipeline(**collaborators)

    return _make
