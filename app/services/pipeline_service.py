"""
Minting pipeline.

This module coordinates the creation of an NFT from a text prompt:

    1. validate the request
    2. generate the image
    3. synthesize metadata, then estimate a price (both may degrade to fallbacks)
    4. create the asset record (status `minting`)
    5. pin the image, then the metadata document that embeds its locator
    6. mint the token from the metadata locator
    7. finalize the record (status `minted`)

Failures before step 4 leave no record behind. Failures in steps 5 and 6
mark the record `failed` before the error is returned to the caller. A
failure in step 7 is returned as is: the token already exists on chain and
the record keeps its last status.
"""

import logging
from enum import Enum
from typing import Optional

from app.core.errors import PipelineError, ValidationError
from app.db.client import get_db
from app.models.asset import Asset, AssetDraft, AssetStatus
from app.models.mint import MintRequest, MintResult
from app.services.assets_service import AssetRegistry
from app.services.image_service import ImageService
from app.services.metadata_service import MetadataSynthesizer, PriceEstimator
from app.services.minter_service import ChainMinter
from app.services.storage_service import StorageUploader, build_metadata_document
from app.util.provider_helpers import image_filename

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    REGISTERED = "registered"
    UPLOADING = "uploading"
    MINTING = "minting"
    MINTED = "minted"
    FAILED = "failed"


def validate_request(request: MintRequest) -> None:
    """
    Checks that a request carries everything the pipeline needs.

    Raises:
        ValidationError: If the prompt is blank or a context value is missing.
    """

    if not request.prompt or not request.prompt.strip():
        raise ValidationError("Prompt is required")
    if not request.wallet_address or not request.wallet_address.strip():
        raise ValidationError("Wallet address is required")
    if not request.chain or not request.chain.strip():
        raise ValidationError("Chain is required")
    if not request.user_id or not request.user_id.strip():
        raise ValidationError("User id is required")


class MintPipeline:
    """
    Orchestrates one minting run per call to `run`.

    The pipeline is the only writer of an asset's status.

    Args:
        image_service (ImageService): Prompt -> image reference.
        metadata_synthesizer (MetadataSynthesizer): Prompt -> metadata.
        price_estimator (PriceEstimator): Metadata -> price suggestion.
        registry (AssetRegistry): Asset store.
        uploader (StorageUploader): IPFS pinning.
        minter (ChainMinter): On-chain minting.
    """

    def __init__(
        self,
        image_service: ImageService,
        metadata_synthesizer: MetadataSynthesizer,
        price_estimator: PriceEstimator,
        registry: AssetRegistry,
        uploader: StorageUploader,
        minter: ChainMinter,
    ):
        self.image_service = image_service
        self.metadata_synthesizer = metadata_synthesizer
        self.price_estimator = price_estimator
        self.registry = registry
        self.uploader = uploader
        self.minter = minter

    async def run(self, request: MintRequest) -> MintResult:
        """
        Runs the pipeline for one request.

        Returns:
            MintResult: Asset id, IPFS locators and on-chain identifiers.

        Raises:
            ValidationError: Bad request; nothing was created.
            GenerationError: Image or metadata generation failed; nothing was created.
            PersistenceError: The record could not be created (no `asset_id`)
                or finalized (with `asset_id`).
            UploadError: Pinning failed; the record is marked `failed`.
            MintError: Minting failed; the record is marked `failed`.
        """

        validate_request(request)
        prompt = request.prompt.strip()

        stage = PipelineStage.GENERATING
        logger.info("Starting mint pipeline for user %s on %s", request.user_id, request.chain)

        image_ref = await self.image_service.generate(prompt)
        metadata = await self.metadata_synthesizer.synthesize(prompt, image_ref)
        price = await self.price_estimator.estimate(metadata)

        asset = await self.registry.create(
            AssetDraft(
                owner_id=request.user_id,
                owner_address=request.wallet_address,
                prompt=prompt,
                ai_image_url=image_ref,
                name=metadata.name,
                description=metadata.description,
                attributes=metadata.attributes,
                price_suggestion=price,
                chain=request.chain,
            )
        )
        stage = PipelineStage.REGISTERED
        logger.info("Asset %s registered, status %s", asset.id, asset.status.value)

        try:
            stage = PipelineStage.UPLOADING
            image_locator = await self.uploader.upload_image(image_ref, image_filename(metadata.name))
            document = build_metadata_document(metadata, image_locator)
            metadata_locator = await self.uploader.upload_metadata_document(document)

            stage = PipelineStage.MINTING
            receipt = await self.minter.mint(
                request.wallet_address,
                metadata_locator,
                metadata.name,
                metadata.description,
                request.chain,
            )
        except Exception as exc:
            logger.error("Asset %s failed while %s: %s", asset.id, stage.value, exc)
            await self._mark_failed(asset)
            if isinstance(exc, PipelineError) and exc.asset_id is None:
                exc.asset_id = asset.id
            raise

        try:
            await self.registry.update(
                asset.id,
                {
                    "ipfs_image_uri": image_locator,
                    "ipfs_metadata_uri": metadata_locator,
                    "token_id": receipt.token_id,
                    "contract_address": receipt.contract_address,
                    "tx_hash": receipt.tx_hash,
                    "status": AssetStatus.MINTED,
                    "price_suggestion": price.model_dump(),
                },
            )
        except PipelineError as exc:
            logger.error(
                "Asset %s minted on chain (token %s, contract %s, tx %s) but the record was not finalized: %s",
                asset.id, receipt.token_id, receipt.contract_address, receipt.tx_hash, exc,
            )
            exc.asset_id = asset.id
            raise

        stage = PipelineStage.MINTED
        logger.info("Asset %s %s with token %s", asset.id, stage.value, receipt.token_id)

        return MintResult(
            asset_id=asset.id,
            image_locator=image_locator,
            metadata_locator=metadata_locator,
            token_id=receipt.token_id,
            contract_address=receipt.contract_address,
            tx_hash=receipt.tx_hash,
            chain=request.chain,
        )

    async def _mark_failed(self, asset: Asset) -> None:
        """Best-effort write of status `failed`; a failing write is only logged."""
        try:
            await self.registry.update(asset.id, {"status": AssetStatus.FAILED})
        except Exception:
            logger.exception("Could not mark asset %s as failed; it stays in %s", asset.id, asset.status.value)


def build_pipeline(registry: Optional[AssetRegistry] = None) -> MintPipeline:
    """Builds a pipeline from the application settings."""
    return MintPipeline(
        image_service=ImageService(),
        metadata_synthesizer=MetadataSynthesizer(),
        price_estimator=PriceEstimator(),
        registry=registry or AssetRegistry(get_db()),
        uploader=StorageUploader(),
        minter=ChainMinter(),
    )


def get_pipeline() -> MintPipeline:
    """FastAPI dependency returning a pipeline bound to the global database."""
    return build_pipeline()
