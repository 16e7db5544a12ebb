"""
Listing schemas.

Schemas:
    - ListingCreate: Request body used to list a minted asset for sale.
    - ListingResponse: Listing record returned by the API.
"""

from pydantic import BaseModel, Field

from app.models.listing import Listing


class ListingCreate(BaseModel):
    """
    Request to list a minted asset on the marketplace.

    Example:
        >>> ListingCreate(nft_id="665f1c2e9b1e8a0f5c3d2a10", seller_id="user-1",
        ...               seller_address="0x1234", price=0.05)
    """

    nft_id: str
    """Identifier of the minted asset."""

    seller_id: str
    """Identifier of the seller; must be the asset owner."""

    seller_address: str
    """Wallet address receiving the payment."""

    price: float = Field(gt=0)
    """Asking price."""

    currency: str = "MATIC"
    """Currency of the asking price."""


class ListingResponse(Listing):
    pass
