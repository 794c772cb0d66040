"""
Configuration module for Commission Calculator Bot
Loads environment variables and provides typed constants
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Bot configuration
BOT_TOKEN: str = os.getenv("BOT_TOKEN", "")

# Google Sheets configuration (optional, enables history export to a spreadsheet)
SPREADSHEET_ID: str = os.getenv("SPREADSHEET_ID", "")
GSPREAD_CREDENTIALS: str = os.getenv("GSPREAD_CREDENTIALS", "credentials.json")
HISTORY_WORKSHEET: str = os.getenv("HISTORY_WORKSHEET", "History")

# Bot settings
REPLY_TIMEOUT_STR = os.getenv("REPLY_TIMEOUT", "10")
HISTORY_PREVIEW_STR = os.getenv("HISTORY_PREVIEW", "10")

def _is_positive_int(value: str) -> bool:
    return value.isdigit() and int(value) > 0

REPLY_TIMEOUT: int = int(REPLY_TIMEOUT_STR) if _is_positive_int(REPLY_TIMEOUT_STR) else 10
HISTORY_PREVIEW: int = int(HISTORY_PREVIEW_STR) if _is_positive_int(HISTORY_PREVIEW_STR) else 10

def check_config() -> None:
    """Fail fast on missing or malformed settings"""
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is required in environment variables")
    if not _is_positive_int(REPLY_TIMEOUT_STR):
        raise RuntimeError("REPLY_TIMEOUT must be a positive integer")
    if not _is_positive_int(HISTORY_PREVIEW_STR):
        raise RuntimeError("HISTORY_PREVIEW must be a positive integer")
