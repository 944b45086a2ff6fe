from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from resort.models import Room


def has_active_discount(room: Room, now: datetime) -> bool:
    if not room.discount_active or not room.discount_percentage:
        return False
    if room.discount_start is None or room.discount_end is None:
        return False
    return room.discount_start <= now <= room.discount_end


def effective_price(room: Room, now: datetime) -> Decimal:
    """
    Nightly price at `now`.
    While the seasonal discount applies the result is rounded to a whole
    currency unit; otherwise the base price is returned untouched.
    """
    price = Decimal(room.price)
    if not has_active_discount(room, now):
        return price

    discount = price * Decimal(room.discount_percentage) / Decimal(100)
    return (price - discount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
