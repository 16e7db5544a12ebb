from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from app.models.asset import AssetStatus, Attribute, PriceEstimate


class AssetResponse(BaseModel):
    id: str
    owner_id: str
    owner_address: str
    prompt: str
    ai_image_url: str
    name: str
    description: str
    attributes: List[Attribute]
    price_suggestion: Optional[PriceEstimate] = None
    chain: str
    ipfs_image_uri: Optional[str] = None
    ipfs_metadata_uri: Optional[str] = None
    token_id: Optional[str] = None
    contract_address: Optional[str] = None
    tx_hash: Optional[str] = None
    status: AssetStatus
    created_at: datetime
    updated_at: datetime
