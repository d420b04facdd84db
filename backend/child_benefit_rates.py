"""Weekly Child Benefit rates by tax year.

Rates are weekly amounts in pounds for the eldest (first) child and for each
additional child. They are held as exact decimals so that summing up to 53
weeks of payments never drifts.

Source: HMRC Child Benefit rates
https://www.gov.uk/government/publications/rates-and-allowances-tax-credits-child-benefit-and-guardians-allowance
"""

from dataclasses import dataclass
from decimal import Decimal

from tax_years import UnsupportedTaxYearError


@dataclass(frozen=True)
class ChildBenefitRates:
    year: int
    first_child_rate: Decimal
    additional_child_rate: Decimal

    def weekly_amount(self, num_children: int) -> Decimal:
        """Total Child Benefit paid for one week.

        Args:
            num_children: Number of children eligible in that week

        Returns:
            Weekly amount in £ (zero when no child is eligible)
        """
        if num_children <= 0:
            return Decimal("0")
        return self.first_child_rate + (num_children - 1) * self.additional_child_rate


CHILD_BENEFIT_RATES = {
    2012: ChildBenefitRates(2012, Decimal("20.30"), Decimal("13.40")),
    2013: ChildBenefitRates(2013, Decimal("20.30"), Decimal("13.40")),
    2014: ChildBenefitRates(2014, Decimal("20.50"), Decimal("13.55")),
    # Frozen at 2015-16 levels (Welfare Reform and Work Act 2016)
    2015: ChildBenefitRates(2015, Decimal("20.70"), Decimal("13.70")),
    2016: ChildBenefitRates(2016, Decimal("20.70"), Decimal("13.70")),
    2017: ChildBenefitRates(2017, Decimal("20.70"), Decimal("13.70")),
    2018: ChildBenefitRates(2018, Decimal("20.70"), Decimal("13.70")),
    2019: ChildBenefitRates(2019, Decimal("20.70"), Decimal("13.70")),
}


def rates_for(year: int) -> ChildBenefitRates:
    try:
        return CHILD_BENEFIT_RATES[year]
    except KeyError:
        raise UnsupportedTaxYearError(year) from None
