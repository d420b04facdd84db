"""Tax year date ranges for the High Income Child Benefit Charge."""

from datetime import date, timedelta

# The charge applies to Child Benefit received from 7 January 2013
# Source: Finance Act 2012, Schedule 1
# https://www.gov.uk/child-benefit-tax-charge
TAX_COMMENCEMENT_DATE = date(2013, 1, 7)

FIRST_TAX_YEAR = 2012
LAST_TAX_YEAR = 2019

# Tax year -> (6 April, 5 April of the following year)
TAX_YEARS = {
    year: (date(year, 4, 6), date(year + 1, 4, 5))
    for year in range(FIRST_TAX_YEAR, LAST_TAX_YEAR + 1)
}


class UnsupportedTaxYearError(ValueError):
    """Raised when a calculation needs a tax year outside the supported table."""

    def __init__(self, year):
        super().__init__(f"No data for tax year {year!r}")
        self.year = year


def range_for(year: int | None) -> tuple[date, date] | None:
    return TAX_YEARS.get(year)


def tax_year_range(year: int | None) -> tuple[date, date]:
    """Like range_for, but an unknown year is an error."""
    tax_year = range_for(year)
    if tax_year is None:
        raise UnsupportedTaxYearError(year)
    return tax_year


def monday_on_or_after(day: date) -> date:
    """Return the date of the closest Monday on or after the date supplied.

    A Monday is returned unchanged.
    """
    return day + timedelta(days=(7 - day.weekday()) % 7)
