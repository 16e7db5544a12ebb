"""
Chain minting service.

Submits mint transactions through Verbwire QuickMint, which mints an ERC-721
token from a metadata URL into the provider's shared collection.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.errors import MintError
from app.models.mint import MintReceipt
from app.util.provider_helpers import get_api_key, get_provider_chain
from app.util.retry import CONNECT_ERRORS, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


def _first(data: dict, *keys: str) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def parse_mint_response(data: dict) -> MintReceipt:
    """
    Reads the token id, contract address and transaction hash of a mint.

    Both snake_case and camelCase field names are accepted.

    Raises:
        MintError: If any of the three values is missing.
    """

    if not isinstance(data, dict):
        raise MintError("Minting provider returned an invalid response")

    token_id = _first(data, "token_id", "tokenId")
    contract_address = _first(data, "contract_address", "contractAddress")
    tx_hash = _first(data, "transaction_hash", "transactionHash")

    if token_id is None or contract_address is None or tx_hash is None:
        raise MintError(f"Minting provider response is missing chain data: {data}")

    return MintReceipt(token_id=token_id, contract_address=contract_address, tx_hash=tx_hash)


class ChainMinter:
    """
    Client for the Verbwire QuickMint endpoint.

    Minting is not idempotent at the provider, so requests are retried only
    when the connection could not be established.

    Args:
        api_key (str): Verbwire API key.
        base_url (str): API base URL.
        timeout (float): Timeout applied to each request, in seconds.
        retry_policy (RetryPolicy): Policy for connection failures.
        transport: Optional `httpx` transport (used by tests).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.VERBWIRE_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.VERBWIRE_BASE_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.HTTP_MAX_ATTEMPTS, retry_on_status=()
        )
        self.transport = transport

    async def mint(
        self,
        recipient_address: str,
        metadata_uri: str,
        name: str,
        description: str,
        chain: str,
    ) -> MintReceipt:
        """
        Mints a token for a pinned metadata document.

        Args:
            recipient_address (str): Wallet receiving the token.
            metadata_uri (str): IPFS locator of the metadata document.
            name (str): Token name.
            description (str): Token description.
            chain (str): Internal chain identifier; mapped to the provider's
                chain name, unmapped values use the default chain.

        Returns:
            MintReceipt: Token id, contract address and transaction hash.

        Raises:
            MintError: If the request fails or the response lacks chain data.
        """

        api_key = get_api_key(self.api_key, "Verbwire", MintError)
        provider_chain = get_provider_chain(chain)
        payload = {
            "recipientAddress": recipient_address,
            "metadataUrl": metadata_uri,
            "name": name,
            "description": description,
            "chain": provider_chain,
        }
        headers = {"X-API-Key": api_key}

        async def _request() -> dict:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = await client.post("/nft/mint/quickMintFromMetadataUrl", json=payload, headers=headers)
                response.raise_for_status()
                return response.json()

        logger.info("Minting NFT on chain %s (%s)", chain, provider_chain)
        try:
            data = await call_with_retry(
                _request, self.retry_policy, retry_exceptions=CONNECT_ERRORS, description="mint"
            )
        except httpx.HTTPStatusError as e:
            logger.error("NFT minting error: %s", e.response.text)
            raise MintError("Failed to mint NFT on blockchain") from e
        except httpx.RequestError as e:
            raise MintError(f"Connection error to minting provider: {e}") from e
        except ValueError as e:
            raise MintError(f"Invalid response from minting provider: {e}") from e

        receipt = parse_mint_response(data)
        logger.info("NFT minted successfully: token %s tx %s", receipt.token_id, receipt.tx_hash)
        return receipt
