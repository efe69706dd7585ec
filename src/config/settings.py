"""
Configuration settings for the Customer Address Backend
"""

import os
import logging

logger = logging.getLogger(__name__)

# Environment configuration
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 5000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
if not isinstance(logging.getLevelName(LOG_LEVEL), int):
    logger.warning(f"Unknown LOG_LEVEL {LOG_LEVEL!r}, using INFO")
    LOG_LEVEL = "INFO"

# Routes are mounted at the root by default; set "/api" to serve under a prefix
API_PREFIX = os.getenv("API_PREFIX", "").rstrip("/")

# Connection pool configuration
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))

# Apply database/schema.sql on startup (CREATE TABLE IF NOT EXISTS only)
INIT_DB_SCHEMA = os.getenv("INIT_DB_SCHEMA", "false").lower() in ("1", "true", "yes")

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

if not DATABASE_URL:
    logger.warning("DATABASE_URL not set - the database pool cannot be initialized")
