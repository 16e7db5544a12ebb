"""
NFT Minting Backend — FastAPI application entry point.

This module initializes the FastAPI application that turns text prompts
into minted NFTs. It configures logging and CORS, connects to MongoDB,
maps pipeline errors to structured JSON responses and registers all API
routes related to minting, generation previews, assets and listings.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import PipelineError, pipeline_error_handler, request_validation_error_handler
from app.core.logger import setup_logging
from app.db.client import close_mongo, init_mongo
from app.routes import assets_routes, generate_routes, listings_routes, mint_routes

setup_logging()

# ------------------------------------------------------------------------------
# Application initialization
# ------------------------------------------------------------------------------

app = FastAPI(
    title="AI NFT Minter",
    description="API to generate, pin and mint AI-created NFTs",
    version="0.1.0"
)

# ------------------------------------------------------------------------------
# Middleware configuration
# ------------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(PipelineError, pipeline_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

# ------------------------------------------------------------------------------
# Application lifecycle events
# ------------------------------------------------------------------------------

@app.on_event("startup")
async def startup_db():
    """
    Initialize the MongoDB client on application startup.

    This ensures that the database connection is ready before handling requests.
    """
    await init_mongo()


@app.on_event("shutdown")
async def shutdown_db():
    await close_mongo()

# ------------------------------------------------------------------------------
# API routes registration
# ------------------------------------------------------------------------------

app.include_router(mint_routes.router, prefix="/mint", tags=["Mint"])
app.include_router(generate_routes.router, prefix="/generate", tags=["Generate"])
app.include_router(assets_routes.router, prefix="/assets", tags=["Assets"])
app.include_router(listings_routes.router, prefix="/listings", tags=["Listings"])
