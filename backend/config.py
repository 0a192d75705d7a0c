"""
Runtime settings, read once from the environment.

Values may be defined in a .env file in the backend root, e.g.:

SERPAPI_API_KEY=your_real_key_here
PAGESCORE_DB_PATH=/var/lib/pagescore/pagescore.db

The app loads environment variables automatically using python-dotenv.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

DB_PATH = Path(os.getenv("PAGESCORE_DB_PATH", "").strip() or Path(__file__).parent / "pagescore.db")

SERPAPI_API_KEY = os.getenv("SERPAPI_API_KEY", "").strip()
SERPAPI_ENDPOINT = "https://serpapi.com/search.json"
RANK_CHECK_DELAY_SECONDS = float(os.getenv("RANK_CHECK_DELAY_SECONDS", "2.0"))
RANK_CHECK_LOCATION = os.getenv("RANK_CHECK_LOCATION", "Netherlands")
RANK_CHECK_DEVICE = os.getenv("RANK_CHECK_DEVICE", "desktop")
RANK_CHECK_TIMEOUT_SECONDS = float(os.getenv("RANK_CHECK_TIMEOUT_SECONDS", "30"))

SCRAPE_TIMEOUT_SECONDS = float(os.getenv("SCRAPE_TIMEOUT_SECONDS", "12"))
SITEMAP_TIMEOUT_SECONDS = float(os.getenv("SITEMAP_TIMEOUT_SECONDS", "10"))
SITEMAP_DEFAULT_LIMIT = int(os.getenv("SITEMAP_DEFAULT_LIMIT", "500"))

CORS_ALLOW_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()
] or ["*"]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
