import os
import secrets
from dotenv import load_dotenv

# Load environment variables from the .env file located in the project root
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '..', '.env'))

# Store
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")

# Session tokens
# Without a configured key a random one is generated per process, so tokens
# do not survive a restart. Set SECRET_KEY (at least 32 bytes) in production.
SECRET_KEY = os.getenv("SECRET_KEY") or secrets.token_hex(32)
if len(SECRET_KEY.encode()) < 32:
    raise RuntimeError("SECRET_KEY must be at least 32 bytes long")
TOKEN_ALGORITHM = os.getenv("TOKEN_ALGORITHM", "HS256")
TOKEN_EXPIRE_MINUTES = int(os.getenv("TOKEN_EXPIRE_MINUTES", "60"))

# Rate limiting (fixed window, per route group and client address)
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5"))
RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
RATE_LIMIT_MESSAGE = os.getenv(
    "RATE_LIMIT_MESSAGE",
    "Too many requests, please try again after 1 minutes!"
)

# HTTP surface
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")
PRODUCTS_PREFIX = os.getenv("PRODUCTS_PREFIX", "/p")
DOCS_URL = "/api-docs"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() == "true"

SERVICE_NAME = "storefront-api"
SERVICE_VERSION = "1.0.0"
