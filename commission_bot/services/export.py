"""
Spreadsheet export service
Writes calculation records to temporary CSV files ready to be sent as documents
"""

import csv
import datetime
import tempfile
from typing import Optional, Sequence

from commission_bot.records import CalculationRecord, EXPORT_HEADERS, TIMESTAMP_FORMAT, to_row
from commission_bot.services.commission import PRODUCTS

def write_history_csv(records: Sequence[CalculationRecord]) -> str:
    """
    Write records to a temporary CSV file

    Args:
        records: Records in the order they should appear

    Returns:
        Path of the file, the caller removes it after sending
    """
    with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.csv',
                                     encoding='utf-8', newline='') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(EXPORT_HEADERS)

        for record in records:
            writer.writerow(to_row(record))

        return csvfile.name

def write_report_csv(record: CalculationRecord, now: Optional[datetime.datetime] = None) -> str:
    """
    Write a single calculation report to a temporary CSV file

    Args:
        record: Calculation to report
        now: Report date, defaults to the current time

    Returns:
        Path of the file, the caller removes it after sending
    """
    if now is None:
        now = datetime.datetime.now()

    counts = {
        'locks': record.locks,
        'stocks': record.stocks,
        'barrels': record.barrels,
    }

    with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.csv',
                                     encoding='utf-8', newline='') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(['Report'])
        writer.writerow(['Date', now.strftime(TIMESTAMP_FORMAT)])
        writer.writerow(['ID', record.employee_id])
        writer.writerow(['Name', record.employee_name])
        writer.writerow([])

        writer.writerow(['Item', 'Qty', 'Price', 'Total'])
        for name, price, _ in PRODUCTS:
            qty = counts[name]
            writer.writerow([name.capitalize(), qty, price, qty * price])
        writer.writerow([])

        writer.writerow(['Total Sales', record.sales])
        writer.writerow(['Tier 1', record.commission.tier1])
        writer.writerow(['Tier 2', record.commission.tier2])
        writer.writerow(['Tier 3', record.commission.tier3])
        writer.writerow(['Commission', record.commission.total])

        return csvfile.name
