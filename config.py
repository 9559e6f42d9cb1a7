"""
Configuration settings for the Blog list API
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "bloglist")
PORT = int(os.getenv("PORT", 8000))

# Cost factor for password hashes
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")]

if not os.getenv("DATABASE_URL"):
    logger.warning("DATABASE_URL not set - falling back to %s", DATABASE_URL)
