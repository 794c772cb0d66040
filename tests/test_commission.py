"""
Unit tests for commission service
Tests sales amount and progressive tier calculation
"""

import unittest

from commission_bot.services.commission import (
    CommissionBreakdown,
    PRODUCTS,
    compute_commission,
    compute_sales_amount,
    max_units,
)


class TestSalesAmount(unittest.TestCase):
    """Test cases for sales amount"""

    def test_weighted_sum(self):
        for locks, stocks, barrels in [(1, 1, 1), (10, 10, 10), (70, 80, 90), (3, 0, 7)]:
            with self.subTest(locks=locks, stocks=stocks, barrels=barrels):
                self.assertAlmostEqual(
                    compute_sales_amount(locks, stocks, barrels),
                    45.0 * locks + 30.0 * stocks + 25.0 * barrels
                )

    def test_ten_of_each_is_one_thousand(self):
        self.assertEqual(compute_sales_amount(10, 10, 10), 1000.0)

    def test_product_limits(self):
        self.assertEqual(max_units('locks'), 70)
        self.assertEqual(max_units('stocks'), 80)
        self.assertEqual(max_units('barrels'), 90)
        self.assertEqual([name for name, _, _ in PRODUCTS], ['locks', 'stocks', 'barrels'])

    def test_unknown_product(self):
        with self.assertRaises(KeyError):
            max_units('keys')


class TestCommission(unittest.TestCase):
    """Test cases for commission tiers"""

    def assertBreakdown(self, result, tier1, tier2, tier3, total):
        self.assertAlmostEqual(result.tier1, tier1)
        self.assertAlmostEqual(result.tier2, tier2)
        self.assertAlmostEqual(result.tier3, tier3)
        self.assertAlmostEqual(result.total, total)

    def test_first_tier_boundary(self):
        self.assertEqual(compute_commission(1000), CommissionBreakdown(100.0, 0.0, 0.0, 100.0))

    def test_inside_first_tier(self):
        self.assertBreakdown(compute_commission(500), 50, 0, 0, 50)

    def test_inside_second_tier(self):
        """Remaining 500 after tier 1, 15% of it"""
        self.assertBreakdown(compute_commission(1500), 100, 75, 0, 175)

    def test_second_tier_boundary(self):
        self.assertBreakdown(compute_commission(1800), 100, 120, 0, 220)

    def test_third_tier(self):
        """Remaining 200 after both capped tiers, 20% of it"""
        self.assertBreakdown(compute_commission(2000), 100, 120, 40, 260)

    def test_maximum_sales(self):
        sales = compute_sales_amount(70, 80, 90)
        self.assertAlmostEqual(sales, 7800)
        self.assertBreakdown(compute_commission(sales), 100, 120, 1200, 1420)

    def test_fractional_amounts_are_not_rounded(self):
        self.assertBreakdown(compute_commission(123.456), 12.3456, 0, 0, 12.3456)
        self.assertBreakdown(compute_commission(1000.004), 100, 0.0006, 0, 100.0006)
        self.assertBreakdown(compute_commission(1800.05), 100, 120, 0.01, 220.01)

    def test_zero_sales(self):
        self.assertBreakdown(compute_commission(0), 0, 0, 0, 0)

    def test_negative_sales_clamped_to_zero(self):
        self.assertBreakdown(compute_commission(-250), 0, 0, 0, 0)

    def test_total_is_sum_of_tiers(self):
        for sales in [0, 120, 1000, 1001, 1799, 1800, 2345, 7800]:
            with self.subTest(sales=sales):
                result = compute_commission(sales)
                self.assertEqual(result.total, result.tier1 + result.tier2 + result.tier3)

    def test_monotonic(self):
        previous = compute_commission(0).total
        for sales in range(5, 8000, 5):
            current = compute_commission(sales).total
            self.assertGreaterEqual(current, previous, f"commission dropped at {sales}")
            previous = current

    def test_continuous_at_break_points(self):
        for point in (1000, 1800):
            with self.subTest(point=point):
                below = compute_commission(point - 0.01).total
                above = compute_commission(point + 0.01).total
                self.assertLess(above - below, 0.02)


if __name__ == '__main__':
    unittest.main()
