"""
Listing model definition.

A listing offers a minted asset for sale on the marketplace. Listings are
created only for assets in status `minted`, by their owner.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class Listing(BaseModel):
    id: str
    nft_id: str
    seller_id: str
    seller_address: str
    price: float
    currency: str
    status: Literal["active", "cancelled"]
    created_at: datetime
    updated_at: datetime
