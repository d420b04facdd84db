"""FastAPI backend for the Child Benefit tax calculator."""

import logging
from typing import Literal

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from calculator import ChildBenefitTaxCalculator
from child_benefit_rates import rates_for
from settings import get_settings
from tax_years import TAX_YEARS

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Form fields arrive as strings; blanks are treated as missing
FormValue = int | str | None


class DateParts(BaseModel):
    year: FormValue = None
    month: FormValue = None
    day: FormValue = None


class StartingChildParams(BaseModel):
    start: DateParts | None = None
    end: DateParts | None = None


class ClaimRequest(BaseModel):
    adjusted_net_income: str | None = None
    children_count: int = 1
    part_year_children_count: int = 0
    is_part_year_claim: Literal["yes", "no"] | None = None
    year: int | None = None
    # Keyed "0", "1", ... as posted by the form
    starting_children: dict[str, StartingChildParams] = {}

    # Income components used to work out adjusted net income
    gross_income: str | None = None
    other_income: str | None = None
    pensions: str | None = None
    property: str | None = None
    non_employment_income: str | None = None
    pension_contributions_from_pay: str | None = None
    retirement_annuities: str | None = None
    cycle_scheme: str | None = None
    childcare: str | None = None
    gift_aid_donations: str | None = None
    outgoing_pension_contributions: str | None = None


def run_calculation(claim: ClaimRequest) -> dict:
    calculator = ChildBenefitTaxCalculator(claim.model_dump())
    validation = calculator.validate()

    result = {
        "can_calculate": validation.can_calculate,
        "errors": validation.errors,
        "starting_children_errors": validation.child_errors,
    }
    if not validation.can_calculate:
        logger.info("Calculation rejected for tax year %s: %s", claim.year, sorted(validation.errors))
        return result

    weeks = calculator.benefit_weeks()
    result.update({
        "nothing_owed": calculator.nothing_owed(),
        "percent_tax_charge": calculator.percent_tax_charge(),
        "benefits_claimed_amount": calculator.benefits_claimed_amount(),
        "tax_estimate": calculator.tax_estimate(),
        "child_benefit_start_date": calculator.child_benefit_start_date,
        "child_benefit_end_date": calculator.child_benefit_end_date,
        "weeks": [
            {"week_starting": w.anchor, "eligible_children": w.eligible_children, "amount": w.amount}
            for w in weeks
        ],
    })
    logger.info(
        "Calculated tax year %s: %s%% of £%s = £%s",
        claim.year,
        result["percent_tax_charge"],
        result["benefits_claimed_amount"],
        result["tax_estimate"],
    )
    return result


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/tax-years")
def tax_years():
    years = []
    for year, (start_date, end_date) in TAX_YEARS.items():
        rates = rates_for(year)
        years.append({
            "year": year,
            "start_date": start_date,
            "end_date": end_date,
            "first_child_rate": rates.first_child_rate,
            "additional_child_rate": rates.additional_child_rate,
        })
    return {"data": years}


@app.post("/calculate")
def calculate(claim: ClaimRequest):
    return run_calculation(claim)
