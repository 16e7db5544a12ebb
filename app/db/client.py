"""
MongoDB client initialization and access utilities.

This module configures and manages the asynchronous MongoDB client
used across the minting backend. It connects to the database using
Motor (the async MongoDB driver for Python) and exposes a global client
and database instance for use in other modules.

Collections:
    - nft_assets: One document per pipeline run (see `app.models.asset`).
    - marketplace_listings: Listings of minted assets.

Usage example:
    >>> from app.db.client import init_mongo, get_db
    >>> await init_mongo()
    >>> db = get_db()
    >>> print(await db.list_collection_names())
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import settings

logger = logging.getLogger(__name__)

ASSETS_COLLECTION = "nft_assets"
LISTINGS_COLLECTION = "marketplace_listings"

# Global MongoDB client and database references
client: AsyncIOMotorClient = None
_db: AsyncIOMotorDatabase = None

# ------------------------------------------------------------------------------
# Initialization
# ------------------------------------------------------------------------------

async def init_mongo():
    """
    Initialize the global MongoDB client and database connection.

    It should be called once during application startup (e.g., in `main.py`).
    Also creates the indexes used by the owner and listing queries.
    """
    global client, _db
    client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        connectTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        socketTimeoutMS=settings.MONGODB_TIMEOUT_MS,
    )
    _db = client[settings.MONGODB_DB]
    await _db[ASSETS_COLLECTION].create_index([("owner_id", 1), ("created_at", -1)])
    await _db[LISTINGS_COLLECTION].create_index([("status", 1), ("created_at", -1)])
    logger.info("Connected to MongoDB at %s, using database '%s'", settings.MONGODB_URI, settings.MONGODB_DB)


async def close_mongo():
    """Closes the global client, if any."""
    global client, _db
    if client is not None:
        client.close()
    client = None
    _db = None

# ------------------------------------------------------------------------------
# Database Access
# ------------------------------------------------------------------------------

def get_db() -> AsyncIOMotorDatabase:
    """
    Retrieve the initialized MongoDB database instance.

    Returns:
        AsyncIOMotorDatabase: The connected MongoDB database instance.

    Raises:
        RuntimeError: If the database has not been initialized yet
        (i.e., `init_mongo()` has not been called).
    """

    if _db is None:
        raise RuntimeError("MongoDB was not initialized. Call init_mongo() first.")
    return _db
