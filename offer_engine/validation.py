"""Offer input checks that run before anything is sent to the engine."""

import math
from typing import Optional

from offer_engine.errors import OfferValidationError
from offer_engine.models import OfferInput


NUMERIC_FIELDS = (
    "gross_annual_salary",
    "signing_bonus",
    "work_hours_per_week",
    "years_of_experience",
    "estimated_monthly_rent",
    "current_salary",
)
REQUIRED_TEXT = ("job_title", "country", "city")


def _floor(value) -> Optional[int]:
    if value is None:
        return None
    return int(math.floor(value))


def validate_offer(offer: OfferInput) -> OfferInput:
    """
    Return a normalised copy of ``offer`` or raise OfferValidationError.

    Negative numbers are rejected; fractional ones are floored. Every problem is
    collected so the caller can show them all at once.
    """
    errors: dict[str, str] = {}

    for name in NUMERIC_FIELDS:
        value = getattr(offer, name)
        if value is None:
            continue
        if not math.isfinite(value):
            errors[name] = "Must be a number"
        elif value < 0:
            errors[name] = "Cannot be negative"

    for name in REQUIRED_TEXT:
        if not (getattr(offer, name) or "").strip():
            errors[name] = "Required"

    if "gross_annual_salary" not in errors and _floor(offer.gross_annual_salary) == 0:
        errors["gross_annual_salary"] = "Required"
    if "work_hours_per_week" not in errors and _floor(offer.work_hours_per_week) <= 0:
        errors["work_hours_per_week"] = "Must be positive"

    currency = (offer.currency or "").strip()
    if len(currency) != 3 or not currency.isalpha():
        errors["currency"] = "Must be a 3-letter currency code"

    if errors:
        raise OfferValidationError(errors)

    updates = {name: _floor(getattr(offer, name)) for name in NUMERIC_FIELDS}
    updates["currency"] = currency.upper()
    updates["job_title"] = offer.job_title.strip()
    updates["country"] = offer.country.strip()
    updates["city"] = offer.city.strip()
    return offer.model_copy(update=updates)
