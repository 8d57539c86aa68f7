"""Configuration for the FinAssist shared runtime.

This module centralizes storage keys, preference defaults, paths and
timing values, with environment variable overrides for the values a
deployment is likely to change.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

# Base project root - assumes this file is in finassist/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINASSIST_DATA_DIR", _PROJECT_ROOT / "data"))
DOWNLOAD_DIR = Path(os.getenv("FINASSIST_DOWNLOAD_DIR", DATA_DIR / "downloads"))

# Shared key-value store file
STORE_PATH = Path(
    os.getenv("FINASSIST_STORE_PATH", DATA_DIR / "local_storage.json")
).resolve()

# Storage keys shared by every page
SETTINGS_KEY = "tfm_settings"
PROFILE_KEY = "tfm_profile"
PROFILE_LAST_UPDATE_KEY = "tfm_profile_last_update"
CONTACTS_KEY = "tfm_contacts"
INCOMES_KEY = "tfm_incomes"
EXPENSES_KEY = "tfm_expenses"
NAME_COLLECTION_KEYS = (CONTACTS_KEY, INCOMES_KEY, EXPENSES_KEY)

# Preferences
DEFAULT_PREFERENCES: Dict[str, str] = {
    "theme": "light",
    "fontSize": "medium",
    "fontFamily": "Inter",
}
DEFAULT_FONT_FAMILY = "Inter"
FONT_SIZES: Dict[str, str] = {
    "small": "14px",
    "medium": "16px",
    "large": "18px",
}

# PDF capability wait
PDF_WAIT_TIMEOUT = float(os.getenv("FINASSIST_PDF_WAIT_TIMEOUT", "4.0"))
PDF_WAIT_INTERVAL = float(os.getenv("FINASSIST_PDF_WAIT_INTERVAL", "0.08"))

# Logging
LOG_LEVEL = os.getenv("FINASSIST_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for entry points (Streamlit page, scripts)."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
