"""Reservation pricing: billable nights and stay totals.

A stay that does not end strictly after it starts is priced at zero nights
and a zero total rather than rejected; callers decide whether a zero quote
may be submitted (it may not: see ``StayQuote.bookable``).
"""
import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from domain.value_objects import StayQuote

DateLike = Union[date, datetime]

ONE_DAY = timedelta(days=1)
CENTS = Decimal("0.01")


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, datetime.min.time())


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Return ceil((check_out - check_in) / 1 day), or 0 for a non-positive stay"""
    diff = _as_datetime(check_out) - _as_datetime(check_in)
    nights = math.ceil(diff / ONE_DAY)
    return nights if nights > 0 else 0


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a rate to a 2-place Decimal"""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_total(price_per_night: Union[Decimal, int, float, str], nights: int) -> Decimal:
    """total = nights x price_per_night"""
    if nights <= 0:
        return to_money(0)
    return to_money(to_money(price_per_night) * nights)


def quote_stay(
    check_in: DateLike,
    check_out: DateLike,
    price_per_night: Union[Decimal, int, float, str],
) -> StayQuote:
    """Price a stay for the given nightly rate"""
    nights = calculate_nights(check_in, check_out)
    rate = to_money(price_per_night)
    return StayQuote(
        nights=nights,
        price_per_night=rate,
        total_price=calculate_total(rate, nights),
    )
