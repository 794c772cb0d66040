"""
Google Sheets integration module
Exports saved calculation records to a worksheet through the Google Sheets API
"""

import logging
import time
import gspread
from typing import Optional, Sequence
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError, WorksheetNotFound

from commission_bot.config import GSPREAD_CREDENTIALS, SPREADSHEET_ID, HISTORY_WORKSHEET
from commission_bot.records import CalculationRecord, EXPORT_HEADERS, to_row

logger = logging.getLogger(__name__)

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive',
]

# Global variables for caching
_spreadsheet: Optional[gspread.Spreadsheet] = None
_gc: Optional[gspread.Client] = None

def sheets_enabled() -> bool:
    """Check whether a target spreadsheet is configured"""
    return bool(SPREADSHEET_ID)

def _get_client() -> gspread.Client:
    """Get authenticated gspread client with caching"""
    global _gc
    if _gc is None:
        credentials = Credentials.from_service_account_file(GSPREAD_CREDENTIALS, scopes=SCOPES)
        _gc = gspread.authorize(credentials)
    return _gc

def sh() -> gspread.Spreadsheet:
    """Get spreadsheet instance with caching"""
    global _spreadsheet
    if _spreadsheet is None:
        client = _get_client()
        _spreadsheet = client.open_by_key(SPREADSHEET_ID)
    return _spreadsheet

def history_ws() -> gspread.Worksheet:
    """Get History worksheet, creating it and its header row if missing"""
    spreadsheet = sh()
    try:
        ws = _retry_api_call(lambda: spreadsheet.worksheet(HISTORY_WORKSHEET))
    except WorksheetNotFound:
        logger.info(f"Worksheet {HISTORY_WORKSHEET} not found, creating it")
        ws = _retry_api_call(
            lambda: spreadsheet.add_worksheet(title=HISTORY_WORKSHEET, rows=1000, cols=len(EXPORT_HEADERS))
        )

    # Header row must exist before any data row
    if not _retry_api_call(lambda: ws.row_values(1)):
        _retry_api_call(lambda: ws.append_row(EXPORT_HEADERS))
    return ws

def _retry_api_call(func, max_retries: int = 3, backoff_factor: float = 1.0):
    """Retry API call with exponential backoff"""
    for attempt in range(max_retries):
        try:
            return func()
        except APIError as e:
            if e.response.status_code == 429 and attempt < max_retries - 1:
                wait_time = backoff_factor * (2 ** attempt)
                logger.warning(f"Sheets rate limit hit, retrying in {wait_time}s")
                time.sleep(wait_time)
                continue
            raise
    return None

def append_records(records: Sequence[CalculationRecord]) -> int:
    """Append records to History worksheet and return number of rows written"""
    if not records:
        return 0

    rows = [to_row(record) for record in records]

    ws = history_ws()
    _retry_api_call(lambda: ws.append_rows(rows, value_input_option="USER_ENTERED"))
    logger.info(f"Exported {len(rows)} records to worksheet {HISTORY_WORKSHEET}")
    return len(rows)
