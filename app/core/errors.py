"""
Error taxonomy of the minting pipeline.

Every error raised by the services derives from `PipelineError`. Each class
carries the machine-readable `code` and the HTTP status used when the error
reaches the API surface. Errors raised after the asset record has been
created carry its `asset_id`, so that the caller can locate the record and
inspect its final status.
"""

from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class PipelineError(Exception):
    """Base class for all domain errors."""

    code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, asset_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.asset_id = asset_id

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "asset_id": self.asset_id}


class ValidationError(PipelineError):
    """Bad input. Raised before any side effect."""

    code = "validation_error"
    status_code = 422


class GenerationError(PipelineError):
    """The generative provider could not produce an image or metadata."""

    code = "generation_error"
    status_code = 502


class PersistenceError(PipelineError):
    """The asset store rejected a write or is unreachable."""

    code = "persistence_error"
    status_code = 503


class UploadError(PipelineError):
    """Pinning content to IPFS failed."""

    code = "upload_error"
    status_code = 502


class MintError(PipelineError):
    """The mint transaction could not be submitted."""

    code = "mint_error"
    status_code = 502


class AssetNotFoundError(PipelineError):
    code = "not_found"
    status_code = 404


class ListingError(PipelineError):
    """A marketplace listing precondition does not hold."""

    code = "listing_error"
    status_code = 409


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Renders a `PipelineError` as `{code, message, asset_id}`."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Renders request body validation failures with the same shape as `ValidationError`."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"code": ValidationError.code, "message": "; ".join(messages), "asset_id": None},
    )
