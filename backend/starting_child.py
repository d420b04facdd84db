"""A child whose Child Benefit starts or stops part way through a tax year."""

from datetime import date
from typing import Mapping

from adjusted_net_income import is_present

START_DATE_MISSING = "enter the date Child Benefit started"
INVALID_DATE = "enter a valid date"
END_BEFORE_START = "the date Child Benefit stopped must be after the date it started"


def valid_date_params(params: Mapping | None) -> bool:
    """True when year, month and day are all supplied (not necessarily a real date)."""
    return bool(params) and all(is_present(params.get(part)) for part in ("year", "month", "day"))


def build_date(params: Mapping | None) -> date | None:
    """Build a date from year/month/day parts, or None if they don't make one."""
    if not valid_date_params(params):
        return None
    try:
        return date(int(params["year"]), int(params["month"]), int(params["day"]))
    except (TypeError, ValueError):
        return None


class StartingChild:
    """One child's Child Benefit window.

    A missing start date means benefit was already being paid before the
    period started; a missing end date means it is still being paid.
    Validation never raises: call ``validate()`` to get every problem at once.
    """

    def __init__(self, params: Mapping | None = None):
        params = params or {}
        self.start_params = params.get("start")
        self.end_params = params.get("end")
        self.start_date = build_date(self.start_params)
        self.end_date = build_date(self.end_params)

    def __repr__(self):
        return f"StartingChild(start_date={self.start_date!r}, end_date={self.end_date!r})"

    def validate(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}

        if self.start_date is None:
            message = INVALID_DATE if valid_date_params(self.start_params) else START_DATE_MISSING
            errors.setdefault("start_date", []).append(message)

        if self.end_date is None and valid_date_params(self.end_params):
            errors.setdefault("end_date", []).append(INVALID_DATE)
        elif self.start_date and self.end_date and self.end_date < self.start_date:
            errors.setdefault("end_date", []).append(END_BEFORE_START)

        return errors

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.validate()

    def is_valid(self) -> bool:
        return not self.validate()
