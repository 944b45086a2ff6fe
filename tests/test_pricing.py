"""
Unit tests for seasonal discount pricing
"""
from datetime import datetime
from decimal import Decimal

from resort.domain.pricing import effective_price, has_active_discount

from conftest import make_room


class TestEffectivePrice:

    def test_discount_inside_window(self):
        """1200 with 15% off inside the window is 1020"""
        room = make_room()
        now = datetime(2026, 3, 15)

        assert has_active_discount(room, now) is True
        assert effective_price(room, now) == Decimal("1020")

    def test_window_bounds_are_inclusive(self):
        room = make_room()

        assert effective_price(room, datetime(2026, 3, 1)) == Decimal("1020")
        assert effective_price(room, datetime(2026, 5, 31)) == Decimal("1020")

    def test_outside_window_uses_base_price(self):
        room = make_room()

        assert effective_price(room, datetime(2026, 2, 28, 23, 59)) == Decimal("1200")
        assert effective_price(room, datetime(2026, 6, 1)) == Decimal("1200")

    def test_inactive_discount_ignored(self):
        room = make_room(discount_active=False)
        assert has_active_discount(room, datetime(2026, 3, 15)) is False
        assert effective_price(room, datetime(2026, 3, 15)) == Decimal("1200")

    def test_zero_percentage_is_not_a_discount(self):
        room = make_room(discount_percentage=Decimal("0"))
        assert has_active_discount(room, datetime(2026, 3, 15)) is False

    def test_missing_window_is_not_a_discount(self):
        room = make_room(discount_start=None)
        assert has_active_discount(room, datetime(2026, 3, 15)) is False

    def test_rounds_half_up_to_whole_unit(self):
        # 1001 * 0.5 = 500.5 -> 501
        room = make_room(price=Decimal("1001"), discount_percentage=Decimal("50"))
        assert effective_price(room, datetime(2026, 3, 15)) == Decimal("501")

        # 999 * 0.85 = 849.15 -> 849
        room = make_room(price=Decimal("999"))
        assert effective_price(room, datetime(2026, 3, 15)) == Decimal("849")

    def test_base_price_is_not_rounded(self):
        room = make_room(price=Decimal("1200.50"), discount_active=False)
        assert effective_price(room, datetime(2026, 3, 15)) == Decimal("1200.50")
