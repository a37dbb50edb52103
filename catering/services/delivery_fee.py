# catering/services/delivery_fee.py
"""Delivery fee quote: base tier + mileage + fuel surcharge + setup + wait."""
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")

# (subtotal upper bound in dollars, base fee)
BASE_TIERS = [
    (Decimal("500"), Decimal("35")),
    (Decimal("750"), Decimal("55")),
    (Decimal("1000"), Decimal("75")),
]
BASE_OVER_STEP = Decimal("250")
BASE_OVER_FEE = Decimal("25")

FREE_MILES = Decimal("2")
PER_MILE = Decimal("2")

# (gas price strictly below, surcharge)
FUEL_TABLE = [
    (Decimal("2.25"), Decimal("0.43")),
    (Decimal("2.75"), Decimal("0.52")),
    (Decimal("3.25"), Decimal("0.61")),
    (Decimal("3.75"), Decimal("0.70")),
    (Decimal("4.25"), Decimal("0.79")),
    (Decimal("4.75"), Decimal("0.88")),
    (Decimal("5.25"), Decimal("0.97")),
]
FUEL_OVER_STEP = Decimal("0.50")
FUEL_OVER_FEE = Decimal("0.20")

SETUP_FEE = Decimal("25")
WAIT_BLOCK_MINUTES = 15
WAIT_BLOCK_FEE = Decimal("12.50")


def _dec(value) -> Decimal:
    # str() keeps 5.75 as 5.75 instead of its binary float expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _started_steps(amount: Decimal, step: Decimal) -> int:
    if amount <= 0:
        return 0
    return math.ceil(amount / step)


def base_fee(subtotal_cents: int) -> Decimal:
    subtotal = Decimal(int(subtotal_cents)) / 100
    for bound, fee in BASE_TIERS:
        if subtotal <= bound:
            return fee
    top_bound, top_fee = BASE_TIERS[-1]
    return top_fee + BASE_OVER_FEE * _started_steps(subtotal - top_bound, BASE_OVER_STEP)


def mileage_fee(miles) -> Decimal:
    billable = max(Decimal("0"), _dec(miles) - FREE_MILES)
    return (billable * PER_MILE).quantize(CENT, rounding=ROUND_HALF_UP)


def fuel_surcharge(gas_price) -> Decimal:
    price = _dec(gas_price)
    for below, fee in FUEL_TABLE:
        if price < below:
            return fee
    top_bound, top_fee = FUEL_TABLE[-1]
    extra = FUEL_OVER_FEE * _started_steps(price - top_bound, FUEL_OVER_STEP)
    return (top_fee + extra).quantize(CENT, rounding=ROUND_HALF_UP)


def wait_fee(wait_minutes: int) -> Decimal:
    blocks = _started_steps(Decimal(int(wait_minutes)), Decimal(WAIT_BLOCK_MINUTES))
    return WAIT_BLOCK_FEE * blocks


@dataclass
class FeeQuote:
    base: Decimal
    mileage: Decimal
    fuel: Decimal
    setup: Decimal
    wait: Decimal

    @property
    def total(self) -> Decimal:
        return (self.base + self.mileage + self.fuel + self.setup + self.wait).quantize(CENT)

    @property
    def total_cents(self) -> int:
        return int(self.total * 100)

    def to_dict(self) -> dict:
        return {
            "base_fee": str(self.base.quantize(CENT)),
            "mileage_fee": str(self.mileage.quantize(CENT)),
            "fuel_surcharge": str(self.fuel.quantize(CENT)),
            "setup_fee": str(self.setup.quantize(CENT)),
            "wait_fee": str(self.wait.quantize(CENT)),
            "total": str(self.total),
            "total_cents": self.total_cents,
        }


def quote(subtotal_cents: int, miles, gas_price, setup_required: bool = False,
          wait_minutes: int = 0) -> FeeQuote:
    """
    subtotal_cents must exclude any delivery fee already on the order,
    otherwise a second quote would be charged on top of the first one.
    """
    return FeeQuote(
        base=base_fee(subtotal_cents),
        mileage=mileage_fee(miles),
        fuel=fuel_surcharge(gas_price),
        setup=SETUP_FEE if setup_required else Decimal("0"),
        wait=wait_fee(wait_minutes),
    )


def calculate_delivery_fee(subtotal_cents: int, miles, gas_price, setup_required: bool = False,
                           wait_minutes: int = 0) -> Decimal:
    return quote(subtotal_cents, miles, gas_price, setup_required, wait_minutes).total
