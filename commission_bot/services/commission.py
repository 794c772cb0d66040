"""
Commission calculation service
Converts unit counts into a sales amount and applies the progressive tier schedule
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

# Products: (name, unit_price, max_units)
PRODUCTS: List[Tuple[str, float, int]] = [
    ("locks", 45.0, 70),
    ("stocks", 30.0, 80),
    ("barrels", 25.0, 90),
]

MIN_UNITS = 1

PRICE_LOCK = PRODUCTS[0][1]
PRICE_STOCK = PRODUCTS[1][1]
PRICE_BARREL = PRODUCTS[2][1]

# Tiers: (band_width, commission_rate), None means uncapped
TIERS: List[Tuple[Optional[float], float]] = [
    (1000.0, 0.10),  # first 1000 → 10%
    (800.0, 0.15),   # 1000-1800 → 15%
    (None, 0.20),    # above 1800 → 20%
]


@dataclass(frozen=True)
class CommissionBreakdown:
    """Per-tier commission and their sum"""
    tier1: float
    tier2: float
    tier3: float
    total: float


def max_units(product: str) -> int:
    """Return the upper unit limit for a product name"""
    for name, _, limit in PRODUCTS:
        if name == product:
            return limit
    raise KeyError(product)


def compute_sales_amount(locks: int, stocks: int, barrels: int) -> float:
    """
    Calculate total sales for the given unit counts

    Args:
        locks: Number of locks sold
        stocks: Number of stocks sold
        barrels: Number of barrels sold

    Returns:
        Weighted sum of the counts against unit prices
    """
    return (locks * PRICE_LOCK) + (stocks * PRICE_STOCK) + (barrels * PRICE_BARREL)


def compute_commission(sales_amount: float) -> CommissionBreakdown:
    """
    Calculate commission for a sales amount

    Each tier takes its band out of the remaining amount, so the result is
    continuous at 1000 and 1800. Negative amounts are treated as zero sales.

    Args:
        sales_amount: Total sales

    Returns:
        Commission breakdown, unrounded; format for display
    """
    remaining = max(float(sales_amount), 0.0)
    tiers = []

    for band, rate in TIERS:
        if band is not None and remaining > band:
            portion = band
        else:
            portion = remaining
        tiers.append(portion * rate)
        remaining -= portion

    tier1, tier2, tier3 = tiers
    return CommissionBreakdown(tier1, tier2, tier3, tier1 + tier2 + tier3)
