"""Configuration management for the map search client."""
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Geocoding service
NOMINATIM_URL: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org")
USER_AGENT: str = os.getenv("USER_AGENT", "PostcodeSearchApp/1.0")
ACCEPT_LANGUAGE: str = os.getenv("ACCEPT_LANGUAGE", "en")

# Request pacing (milliseconds)
RATE_LIMIT_MS: int = int(os.getenv("RATE_LIMIT_MS", "1000"))  # Nominatim usage policy: 1 req/s
REQUEST_TIMEOUT_MS: int = int(os.getenv("REQUEST_TIMEOUT_MS", "5000"))

# Input debouncing (milliseconds)
SEARCH_DEBOUNCE_MS: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
HOVER_DEBOUNCE_MS: int = int(os.getenv("HOVER_DEBOUNCE_MS", "300"))
HOVER_SETTLE_MS: int = int(os.getenv("HOVER_SETTLE_MS", "100"))

SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", "5"))

# Logging / error tracking
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# Origin keys: each input source gets its own debounce slot and request token
ORIGIN_SEARCH = "search"
ORIGIN_HOVER = "hover"
ORIGIN_SPLIT_HOVER = "split_hover"

# Map defaults used by the consumer UI
DEFAULT_VIEW = {"latitude": 20.0, "longitude": 0.0, "zoom": 2}
FOCUS_ZOOM: int = 14
