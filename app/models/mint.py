"""
Pipeline value types.

`MintRequest` is the trigger of one pipeline run; `MintResult` is what a
successful run returns. `MintReceipt` is the on-chain outcome reported by
the minting provider.
"""

from pydantic import BaseModel


class MintRequest(BaseModel):
    """
    Trigger of a minting pipeline run.

    The caller's identity and wallet are passed explicitly; the pipeline
    never reads them from session state.

    Example:
        >>> MintRequest(prompt="neon city", chain="polygon-amoy",
        ...             wallet_address="0x1234", user_id="user-1")
    """

    prompt: str
    chain: str
    wallet_address: str
    user_id: str


class MintReceipt(BaseModel):
    token_id: str
    contract_address: str
    tx_hash: str


class MintResult(BaseModel):
    asset_id: str
    image_locator: str
    metadata_locator: str
    token_id: str
    contract_address: str
    tx_hash: str
    chain: str
