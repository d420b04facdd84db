"""Adjusted net income from its component parts.

Adjusted net income is total taxable income less certain reliefs. Gift Aid
donations and pension contributions paid net of basic-rate tax relief are
grossed up before being deducted.

Source: HMRC guidance on adjusted net income
https://www.gov.uk/guidance/adjusted-net-income
"""

import logging
import re
from decimal import Decimal
from typing import Mapping, Protocol

logger = logging.getLogger(__name__)

BASIC_RATE_GROSS_UP = Decimal("1.25")  # 100 / (100 - 20)

ADDITIONS = (
    "gross_income",
    "other_income",
    "pensions",
    "property",
    "non_employment_income",
)
DEDUCTIONS = (
    "pension_contributions_from_pay",
    "retirement_annuities",
    "cycle_scheme",
    "childcare",
)
GROSSED_UP_DEDUCTIONS = (
    "gift_aid_donations",
    "outgoing_pension_contributions",
)

_CURRENCY_NOISE = re.compile(r"[£, -]")
_LEADING_AMOUNT = re.compile(r"\d+(?:\.\d+)?")


class IncomeAggregator(Protocol):
    def can_calculate(self) -> bool: ...

    def calculate_adjusted_net_income(self) -> Decimal: ...


def is_present(value) -> bool:
    """True unless the value is None or a blank string."""
    if value is None:
        return False
    return not (isinstance(value, str) and not value.strip())


def parse_currency(value) -> Decimal:
    """Parse a form amount such as "£55,000" or "1 234.50".

    Currency symbols, commas, spaces and hyphens are ignored. Anything that
    doesn't start with a number is treated as zero.
    """
    if not is_present(value):
        return Decimal("0")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    match = _LEADING_AMOUNT.match(_CURRENCY_NOISE.sub("", str(value)))
    return Decimal(match.group()) if match else Decimal("0")


class AdjustedNetIncomeCalculator:
    def __init__(self, params: Mapping | None = None):
        params = params or {}
        self.gross_income_supplied = is_present(params.get("gross_income"))
        self.amounts = {
            key: parse_currency(params.get(key))
            for key in ADDITIONS + DEDUCTIONS + GROSSED_UP_DEDUCTIONS
        }

    def can_calculate(self) -> bool:
        return self.gross_income_supplied

    def calculate_adjusted_net_income(self) -> Decimal:
        additions = sum(self.amounts[key] for key in ADDITIONS)
        deductions = sum(self.amounts[key] for key in DEDUCTIONS)
        deductions += sum(self.amounts[key] * BASIC_RATE_GROSS_UP for key in GROSSED_UP_DEDUCTIONS)

        income = max(Decimal("0"), additions - deductions)
        logger.debug("Adjusted net income %s (additions %s, deductions %s)", income, additions, deductions)
        return income
