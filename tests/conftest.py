"""Shared fixtures: a scripted engine transport and sample payloads."""
from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from typing import Any

import pytest

from offer_engine.models import AnalysisResult, OfferInput, SavedOffer
from offer_engine.transport.base import EngineRequest, EngineTransport


SAMPLE_RESULT: dict[str, Any] = {
    "financialBreakdown": {
        "monthlyNetIncome": 4650,
        "yearlyNetIncome": 55800,
        "taxAssumptions": "Tax class I, no church tax, statutory health insurance",
        "effectiveTaxRate": 38,
        "usdEquivalent": {"monthlyNet": 5020, "yearlyNet": 60240, "exchangeRate": 1.08},
    },
    "costOfLiving": {
        "rent": 1400,
        "utilities": 250,
        "food": 450,
        "transport": 60,
        "healthcare": 0,
        "insurance": 40,
        "misc": 300,
        "totalEssential": 2500,
        "cityTier": 1,
    },
    "savingsProjection": {"monthlyDisposable": 2150, "monthlySavings": 1500, "annualSavingsPotential": 18000},
    "scores": {
        "purchasingPower": 7,
        "careerImpact": 8,
        "salaryFairness": 74,
        "workLifeBalance": 8,
        "decisionConfidence": "High",
    },
    "globalMetrics": {"avgWeeklyHours": 38, "minPaidLeave": 20, "publicHolidays": 9},
    "riskAnalysis": {"level": "Low", "explanation": "Stable market with strong demand for engineers."},
    "warnings": [],
    "negotiation": {
        "isCompetitive": True,
        "marketRange": "EUR 80,000 - 100,000",
        "suggestedNegotiationRange": "EUR 95,000 - 100,000",
        "weakComponents": ["No signing bonus"],
        "negotiationItems": ["Signing bonus", "Relocation support"],
    },
    "verdict": {
        "decision": "ACCEPT",
        "reasoning": "Competitive pay for the market with healthy savings.",
        "strategicAdvice": "Ask for a signing bonus before accepting.",
        "actionPlan": ["Request a signing bonus", "Confirm relocation budget"],
    },
    "rawMarkdown": "# Offer report\n\n```text\nnet 55,800\n```\n",
}


def sample_result_data(**overrides: Any) -> dict[str, Any]:
    """Deep copy of SAMPLE_RESULT with top-level sections replaced."""
    data = copy.deepcopy(SAMPLE_RESULT)
    data.update(overrides)
    return data


def sample_result_json(**overrides: Any) -> str:
    return json.dumps(sample_result_data(**overrides))


def make_offer(**fields: Any) -> OfferInput:
    data: dict[str, Any] = {
        "jobTitle": "Engineer",
        "country": "Germany",
        "city": "Berlin",
        "grossAnnualSalary": 90000,
        "currency": "EUR",
        "yearsOfExperience": 5,
        "industry": "Technology",
        "careerGoal": "Growth",
    }
    data.update(fields)
    return OfferInput.model_validate(data)


def make_result(**overrides: Any) -> AnalysisResult:
    return AnalysisResult.model_validate(sample_result_data(**overrides))


def make_saved(offer_id: str, currency: str = "EUR", yearly_net: int = 55800, decision: str = "ACCEPT", **fields: Any) -> SavedOffer:
    result = sample_result_data()
    result["financialBreakdown"]["yearlyNetIncome"] = yearly_net
    result["verdict"]["decision"] = decision
    return SavedOffer(
        id=offer_id,
        input=make_offer(currency=currency, **fields),
        result=AnalysisResult.model_validate(result),
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class ScriptedTransport(EngineTransport):
    """Answers each call with the next scripted reply; exceptions are raised."""

    name = "scripted"

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.requests: list[EngineRequest] = []
        self.closed = False

    async def complete(self, request: EngineRequest) -> str:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("Transport called more often than scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def offer() -> OfferInput:
    return make_offer()
