"""High Income Child Benefit Charge calculator.

The charge claws back Child Benefit from households where someone's adjusted
net income is over £50,000: 1% of the benefit for every £100 of income over
the threshold, reaching 100% at £60,000.

Benefit is worked out week by week across the selected tax year so that
children whose claim starts or stops part way through the year are
apportioned correctly.

Source: HMRC High Income Child Benefit Charge
https://www.gov.uk/child-benefit-tax-charge
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping, NamedTuple

from adjusted_net_income import AdjustedNetIncomeCalculator, IncomeAggregator, is_present, parse_currency
from child_benefit_rates import ChildBenefitRates, rates_for
from starting_child import StartingChild, valid_date_params
from tax_years import TAX_COMMENCEMENT_DATE, TAX_YEARS, monday_on_or_after, range_for, tax_year_range

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"\s*[+-]?\d+")

NET_INCOME_THRESHOLD = 50_000
FULL_CHARGE_INCOME = 60_000
INCOME_PER_PERCENT = 100

# Always charged at 99%, whatever the general formula gives
NINETY_NINE_PERCENT_BAND = (59_900, 59_999)

PENCE = Decimal("0.01")

PART_YEAR_CLAIM_MISSING = "select part year tax claim"
TAX_YEAR_MISSING = "select a tax year"
INCOME_MISSING = "enter your adjusted net income"
TOO_MANY_PART_YEAR_CHILDREN = (
    "the number of children you're claiming a part year for can't be more than "
    "the total number of children you're claiming for"
)
NO_BENEFIT_IN_TAX_YEAR = (
    "You haven't received any Child Benefit for the tax year selected. "
    "Check your Child Benefit dates or choose a different tax year."
)


def blackout_window(tax_year: int) -> tuple[date, date]:
    """Start dates in this window don't count towards the tax year.

    Covers the last days before the tax year boundary. The 2012-13 year has
    its own fixed window.
    """
    if tax_year == 2012:
        return date(2013, 4, 1), date(2013, 4, 5)
    return date(tax_year + 1, 3, 31), date(tax_year + 1, 4, 5)


def eligible_for_tax_year(child: StartingChild, tax_year: int) -> bool:
    if child.start_date is None:
        return True
    first, last = blackout_window(tax_year)
    return not first <= child.start_date <= last


def days_include_week(start_date: date | None, end_date: date | None, week_start_date: date) -> bool:
    if start_date is not None and start_date > week_start_date:
        return False
    if end_date is not None and end_date < week_start_date:
        return False
    return True


def eligible(child: StartingChild, tax_year: int, week_start_date: date) -> bool:
    """Whether a starting child counts for the week beginning on the given Monday."""
    adjusted_start_date = monday_on_or_after(child.start_date) if child.start_date else None
    return eligible_for_tax_year(child, tax_year) and days_include_week(
        adjusted_start_date, child.end_date, week_start_date
    )


def percent_tax_charge(adjusted_net_income) -> int:
    """Percentage of Child Benefit repaid as the charge.

    Negative below the threshold; callers check the threshold first.
    """
    if adjusted_net_income >= FULL_CHARGE_INCOME:
        return 100
    low, high = NINETY_NINE_PERCENT_BAND
    if low <= adjusted_net_income <= high:
        return 99
    return math.floor(Decimal(adjusted_net_income - NET_INCOME_THRESHOLD) / INCOME_PER_PERCENT)


class BenefitWeek(NamedTuple):
    anchor: date
    eligible_children: int
    amount: Decimal


@dataclass(frozen=True)
class ValidationResult:
    errors: dict[str, list[str]] = field(default_factory=dict)
    child_errors: list[dict[str, list[str]]] = field(default_factory=list)
    part_year_claim: bool = False

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def starting_children_errors(self) -> bool:
        return self.part_year_claim and any(self.child_errors)

    @property
    def can_calculate(self) -> bool:
        return self.valid and not self.starting_children_errors


class ChildBenefitTaxCalculator:
    """Estimate the charge for one claim.

    Built fresh from the submitted params for every request. ``income`` and
    ``rates`` may be swapped out; by default adjusted net income is worked
    out from the income components in ``params`` and rates come from the
    built-in table.
    """

    def __init__(
        self,
        params: Mapping | None = None,
        income: IncomeAggregator | None = None,
        rates: Callable[[int], ChildBenefitRates] = rates_for,
    ):
        params = params or {}
        self.adjusted_net_income_calculator = income or AdjustedNetIncomeCalculator(params)
        self.rates_provider = rates
        self.adjusted_net_income = self._resolve_adjusted_net_income(params.get("adjusted_net_income"))
        self.children_count = _to_int(params.get("children_count"), 1)
        self.part_year_children_count = _to_int(params.get("part_year_children_count"), 0)
        self.is_part_year_claim = params.get("is_part_year_claim") or None
        self.tax_year = _to_int(params.get("year"), None)
        self.starting_children = self._process_starting_children(params.get("starting_children"))

    @property
    def part_year_claim(self) -> bool:
        return self.is_part_year_claim == "yes"

    @property
    def part_year_children(self) -> int:
        """Part year children only count when a part year claim was made."""
        return self.part_year_children_count if self.part_year_claim else 0

    @property
    def selected_tax_year(self) -> tuple[date, date] | None:
        return range_for(self.tax_year)

    @property
    def child_benefit_start_date(self) -> date:
        if self.tax_year == 2012:
            return TAX_COMMENCEMENT_DATE
        return tax_year_range(self.tax_year)[0]

    @property
    def child_benefit_end_date(self) -> date:
        return tax_year_range(self.tax_year)[1]

    @property
    def rates(self) -> ChildBenefitRates:
        return self.rates_provider(self.tax_year)

    def validate(self) -> ValidationResult:
        errors: dict[str, list[str]] = {}
        child_errors = [child.validate() for child in self.starting_children]

        if self.is_part_year_claim is None:
            errors.setdefault("is_part_year_claim", []).append(PART_YEAR_CLAIM_MISSING)
        if self.tax_year not in TAX_YEARS:
            errors.setdefault("tax_year", []).append(TAX_YEAR_MISSING)
        if self.adjusted_net_income is None:
            errors.setdefault("adjusted_net_income", []).append(INCOME_MISSING)
        if self.part_year_claim and self.children_count < self.part_year_children_count:
            errors.setdefault("part_year_children_count", []).append(TOO_MANY_PART_YEAR_CHILDREN)

        if self.selected_tax_year and any(not e for e in child_errors):
            if not self._children_in_tax_year():
                child_errors[0].setdefault("end_date", []).append(NO_BENEFIT_IN_TAX_YEAR)

        result = ValidationResult(errors, child_errors, self.part_year_claim)
        if not result.can_calculate:
            logger.debug("Claim can't be calculated: %s %s", errors, child_errors)
        return result

    def can_calculate(self) -> bool:
        return self.validate().can_calculate

    def percent_tax_charge(self) -> int:
        return percent_tax_charge(self._require_income())

    def benefit_weeks(self) -> list[BenefitWeek]:
        """Eligible children and benefit paid for each week of the tax year.

        The year is cut into 7-day slices from the start date. Each slice is
        keyed by the Monday on or after its first day.
        """
        rates = self.rates
        full_year_children = max(0, self.children_count - self.part_year_children)
        weeks = []

        day = self.child_benefit_start_date
        while day < self.child_benefit_end_date:
            monday = monday_on_or_after(day)
            count = full_year_children + sum(
                1 for child in self.starting_children if eligible(child, self.tax_year, monday)
            )
            weeks.append(BenefitWeek(monday, count, rates.weekly_amount(count)))
            day += timedelta(days=7)

        return weeks

    def benefits_claimed_amount(self) -> Decimal:
        total = sum((week.amount for week in self.benefit_weeks()), Decimal("0"))
        return total.quantize(PENCE, rounding=ROUND_HALF_UP)

    def tax_estimate(self) -> int:
        return math.floor(self.benefits_claimed_amount() * self.percent_tax_charge() / 100)

    def nothing_owed(self) -> bool:
        if self._require_income() < NET_INCOME_THRESHOLD:
            return True
        estimate = self.tax_estimate()
        logger.debug("Tax estimate for %s: £%s", self.tax_year, estimate)
        return estimate == 0

    def _require_income(self) -> Decimal:
        # Callers check validate() first
        if self.adjusted_net_income is None:
            raise ValueError("No adjusted net income to calculate with; check validate() first")
        return self.adjusted_net_income

    def _resolve_adjusted_net_income(self, adjusted_net_income) -> Decimal | None:
        if self.adjusted_net_income_calculator.can_calculate():
            return self.adjusted_net_income_calculator.calculate_adjusted_net_income()
        if is_present(adjusted_net_income):
            return Decimal(int(parse_currency(adjusted_net_income)))
        return None

    def _process_starting_children(self, children: Mapping | None) -> list[StartingChild]:
        if not self.part_year_claim:
            return []
        # Without a usable tax year the part year count can't be trusted
        if self.selected_tax_year:
            number_of_children = self.part_year_children_count
        else:
            number_of_children = self.children_count

        children = children or {}
        starting_children = []
        for n in range(max(0, number_of_children)):
            child_params = children.get(str(n))
            if child_params and valid_date_params(child_params.get("start")):
                starting_children.append(StartingChild(child_params))
            else:
                starting_children.append(StartingChild())
        return starting_children

    def _children_in_tax_year(self) -> list[StartingChild]:
        first, last = self.selected_tax_year
        return [
            child
            for child in self.starting_children
            if child.start_date is not None
            and child.start_date <= last
            and (child.end_date is None or child.end_date >= first)
        ]


def _to_int(value, default):
    """Leading whole number of a form value, 0 if there isn't one."""
    if not is_present(value):
        return default
    if isinstance(value, int):
        return value
    match = _LEADING_INTEGER.match(str(value))
    return int(match.group()) if match else 0
