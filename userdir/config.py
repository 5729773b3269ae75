"""
Configuration for the userdir application
"""

import os


class Config:
    """Application configuration"""

    # API settings
    TITLE = "userdir"
    DESCRIPTION = "Paginated user directory client with cached lookups and live search"
    VERSION = "1.0.0"
    DOCS_URL = "/docs"
    REDOC_URL = "/redoc"

    # CORS settings
    ALLOW_ORIGINS = ["*"]
    ALLOW_CREDENTIALS = True
    ALLOW_METHODS = ["*"]
    ALLOW_HEADERS = ["*"]

    # Server settings
    HOST = os.getenv("USERDIR_HOST", "0.0.0.0")
    PORT = int(os.getenv("USERDIR_PORT", "8000"))
    RELOAD = os.getenv("USERDIR_RELOAD", "false").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Upstream directory
    DIRECTORY_API_URL = os.getenv("DIRECTORY_API_URL", "https://reqres.in/api")
    DIRECTORY_API_KEY = os.getenv("DIRECTORY_API_KEY", "reqres-free-v1")
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # Cache TTL in seconds (default 5 minutes)
    CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "300"))

    # Quiet period before a typed user id is looked up
    SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))
