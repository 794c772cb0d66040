"""
Calculation records
Immutable snapshots of saved calculations and their tabular export layout
"""

import datetime
from dataclasses import dataclass
from typing import Any, List, Optional

from commission_bot.services.commission import CommissionBreakdown

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

EXPORT_HEADERS: List[str] = [
    'Timestamp',
    'Employee ID',
    'Full Name',
    'Locks',
    'Stocks',
    'Barrels',
    'Total Sales',
    'Tier 1',
    'Tier 2',
    'Tier 3',
    'Commission Total',
]


@dataclass(frozen=True)
class CalculationRecord:
    """Saved calculation"""
    id: str
    timestamp: datetime.datetime
    employee_id: str
    employee_name: str
    locks: int
    stocks: int
    barrels: int
    sales: float
    commission: CommissionBreakdown


def create_record(
    employee_id: str,
    first_name: str,
    last_name: str,
    locks: int,
    stocks: int,
    barrels: int,
    sales: float,
    commission: CommissionBreakdown,
    now: Optional[datetime.datetime] = None,
) -> CalculationRecord:
    """
    Build a record for a calculation the operator chose to save

    Args:
        employee_id: Validated employee identifier
        first_name: Validated first name
        last_name: Validated last name
        locks: Locks sold
        stocks: Stocks sold
        barrels: Barrels sold
        sales: Sales amount computed from the counts
        commission: Commission computed from the sales amount
        now: Creation time, defaults to the current time

    Returns:
        New CalculationRecord
    """
    if now is None:
        now = datetime.datetime.now()

    return CalculationRecord(
        id=str(int(now.timestamp() * 1000)),
        timestamp=now,
        employee_id=employee_id,
        employee_name=f"{first_name.strip()} {last_name.strip()}",
        locks=locks,
        stocks=stocks,
        barrels=barrels,
        sales=sales,
        commission=commission,
    )


def to_row(record: CalculationRecord) -> List[Any]:
    """Flatten a record into a row matching EXPORT_HEADERS"""
    return [
        record.timestamp.strftime(TIMESTAMP_FORMAT),
        record.employee_id,
        record.employee_name,
        record.locks,
        record.stocks,
        record.barrels,
        record.sales,
        record.commission.tier1,
        record.commission.tier2,
        record.commission.tier3,
        record.commission.total,
    ]
