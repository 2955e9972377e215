from decimal import Decimal, ROUND_HALF_UP

from .exceptions import InvalidUsage
from .models import House

CENT = Decimal('0.01')


def quantize_money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# ══════════════════════════════════════════════════════════
#   FUNCTION 1 — demand_breakdown
#   Splits a domestic usage volume across the progressive brackets
#   Returns: list of (lower, upper, volume, rate, charge)
# ══════════════════════════════════════════════════════════
def demand_breakdown(usage, tariff):
    usage  = Decimal(str(usage))
    slices = []
    for lower, upper, rate in tariff.domestic_brackets():
        if usage <= lower:
            break
        top    = usage if upper is None else min(usage, upper)
        volume = top - lower
        slices.append((lower, upper, volume, rate, volume * rate))
    return slices


# ══════════════════════════════════════════════════════════
#   FUNCTION 2 — compute_demand
#   Args: usage volume (KL), tariff schedule, house usage type
#   Returns: Decimal demand rounded half-up to paise
# ══════════════════════════════════════════════════════════
def compute_demand(usage, tariff, usage_type):
    usage = Decimal(str(usage))
    if usage < 0:
        raise InvalidUsage(f'Usage cannot be negative: {usage}', usage=usage)

    if usage_type == House.RESIDENTIAL:
        charge = sum((part[4] for part in demand_breakdown(usage, tariff)), Decimal('0'))
    elif usage_type in tariff.FLAT_RATE_FIELDS:
        charge = usage * tariff.flat_rate(usage_type)
    else:
        raise InvalidUsage(f'Unknown usage type: {usage_type}', usage_type=usage_type)

    return quantize_money(charge)
