"""
Asset model definition.

This module defines the `Asset` data model: the persisted record of one
minting pipeline run and of the token it produced, together with the
value types it embeds (attributes, price suggestion, status).

The model is implemented using Pydantic for data validation and type
hinting, ensuring consistency across the API and MongoDB storage.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator


class AssetStatus(str, Enum):
    """
    Lifecycle status of an asset.

    `generating` is never persisted: the record is created once generation
    has succeeded, directly in `minting`. `failed` is terminal.
    """

    GENERATING = "generating"
    MINTING = "minting"
    MINTED = "minted"
    FAILED = "failed"


class Attribute(BaseModel):
    """A single display trait, e.g. `{"trait_type": "Mood", "value": "Calm"}`."""

    trait_type: str
    value: Union[str, int, float]


class PriceEstimate(BaseModel):
    """
    Suggested price range for an asset.

    Example:
        >>> PriceEstimate(min=0.01, mid=0.05, max=0.1, currency="MATIC").mid
        0.05
    """

    min: float = Field(ge=0, allow_inf_nan=False)
    mid: float = Field(ge=0, allow_inf_nan=False)
    max: float = Field(ge=0, allow_inf_nan=False)
    currency: str = "MATIC"

    @model_validator(mode="after")
    def check_ordering(self):
        if not (self.min <= self.mid <= self.max):
            raise ValueError("price estimate must satisfy min <= mid <= max")
        return self


class NFTMetadata(BaseModel):
    """Descriptive metadata produced by the metadata synthesizer."""

    name: str = Field(min_length=1)
    """Title of the piece (the model is asked for at most 50 characters)."""

    description: str
    """Short description (the model is asked for at most 200 characters)."""

    attributes: List[Attribute] = Field(default_factory=list)
    """Ordered trait list, in display order."""


class AssetDraft(BaseModel):
    """Fields known when the asset record is first created."""

    owner_id: str
    owner_address: str
    prompt: str
    ai_image_url: str
    name: str
    description: str
    attributes: List[Attribute] = Field(default_factory=list)
    price_suggestion: Optional[PriceEstimate] = None
    chain: str


class Asset(AssetDraft):
    """
    Represents a persisted asset.

    Example:
        >>> asset = Asset(
        ...     id="665f1c2e9b1e8a0f5c3d2a10",
        ...     owner_id="user-1",
        ...     owner_address="0x1234",
        ...     prompt="neon city",
        ...     ai_image_url="https://images.example/neon.webp",
        ...     name="Neon Dreams",
        ...     description="A city that never sleeps",
        ...     chain="polygon-amoy",
        ...     status=AssetStatus.MINTING,
        ...     created_at=datetime.now(),
        ...     updated_at=datetime.now(),
        ... )
        >>> asset.status.value
        'minting'
    """

    id: str
    """Opaque identifier (the MongoDB ObjectId as a string)."""

    ipfs_image_uri: Optional[str] = None
    ipfs_metadata_uri: Optional[str] = None
    token_id: Optional[str] = None
    contract_address: Optional[str] = None
    tx_hash: Optional[str] = None

    status: AssetStatus

    created_at: datetime
    updated_at: datetime
