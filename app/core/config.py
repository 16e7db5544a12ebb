"""
Application configuration.

Settings are read from environment variables, optionally loaded from a
`.env` file in the working directory.

Environment variables:
    - MONGODB_URI: MongoDB connection string (default: mongodb://localhost:27017)
    - MONGODB_DB: Database name (default: nft_minting)
    - MONGODB_TIMEOUT_MS: Server selection and socket timeout (default: 10000)
    - OPENAI_API_KEY / OPENAI_BASE_URL: Generative model provider
    - VERBWIRE_API_KEY / VERBWIRE_BASE_URL: IPFS storage and minting provider
    - HTTP_TIMEOUT_SECONDS: Timeout applied to every outbound call (default: 60)
    - HTTP_MAX_ATTEMPTS: Attempts per outbound call on transient errors (default: 3)
    - LOG_LEVEL: Root log level (default: INFO)
    - CORS_ALLOW_ORIGINS: Comma separated list of allowed origins (default: *)
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB: str = os.getenv("MONGODB_DB", "nft_minting")
    MONGODB_TIMEOUT_MS: int = int(os.getenv("MONGODB_TIMEOUT_MS", "10000"))

    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    VERBWIRE_API_KEY: str = os.getenv("VERBWIRE_API_KEY", "")
    VERBWIRE_BASE_URL: str = os.getenv("VERBWIRE_BASE_URL", "https://api.verbwire.com/v1")

    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))
    HTTP_MAX_ATTEMPTS: int = int(os.getenv("HTTP_MAX_ATTEMPTS", "3"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ALLOW_ORIGINS: list[str] = [
        origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()
    ]


settings = Settings()
