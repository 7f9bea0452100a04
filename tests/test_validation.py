"""Tests for offer input normalisation."""
from __future__ import annotations

import pytest

from conftest import make_offer
from offer_engine.errors import OfferValidationError
from offer_engine.validation import validate_offer


def test_valid_offer_is_normalised() -> None:
    offer = make_offer(
        jobTitle="  Engineer ",
        currency="eur",
        grossAnnualSalary=90000.75,
        yearsOfExperience=4.9,
        estimatedMonthlyRent=1399.99,
    )

    normalised = validate_offer(offer)

    assert normalised.job_title == "Engineer"
    assert normalised.currency == "EUR"
    assert normalised.gross_annual_salary == 90000
    assert isinstance(normalised.gross_annual_salary, int)
    assert normalised.years_of_experience == 4
    assert normalised.estimated_monthly_rent == 1399
    assert normalised.current_salary is None
    # the original is untouched
    assert offer.gross_annual_salary == 90000.75


def test_all_problems_are_reported_together() -> None:
    offer = make_offer(jobTitle="", city=" ", grossAnnualSalary=-5, signingBonus=-1, currency="EURO")

    with pytest.raises(OfferValidationError) as info:
        validate_offer(offer)

    assert info.value.errors == {
        "gross_annual_salary": "Cannot be negative",
        "signing_bonus": "Cannot be negative",
        "job_title": "Required",
        "city": "Required",
        "currency": "Must be a 3-letter currency code",
    }
    assert "gross_annual_salary: Cannot be negative" in str(info.value)


def test_zero_salary_cannot_be_submitted() -> None:
    with pytest.raises(OfferValidationError) as info:
        validate_offer(make_offer(grossAnnualSalary=0.5))
    assert info.value.errors == {"gross_annual_salary": "Required"}


def test_work_hours_must_be_positive() -> None:
    with pytest.raises(OfferValidationError) as info:
        validate_offer(make_offer(workHoursPerWeek=0))
    assert info.value.errors == {"work_hours_per_week": "Must be positive"}


def test_benchmark_fields_are_optional() -> None:
    plain = validate_offer(make_offer())
    benchmarked = validate_offer(make_offer(currentSalary=70000, currentCountry="Spain"))

    assert not plain.has_benchmark
    assert benchmarked.has_benchmark
    assert benchmarked.current_salary == 70000


@pytest.mark.parametrize("value", [float("inf"), float("nan")])
def test_non_finite_numbers_are_rejected(value: float) -> None:
    with pytest.raises(OfferValidationError) as info:
        validate_offer(make_offer(signingBonus=value))
    assert info.value.errors == {"signing_bonus": "Must be a number"}
