"""The analysis client. Offer in, validated assessment out."""

import json
import logging
import re
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError

from offer_engine.agents.orchestrator import AnalysisWorkflow
from offer_engine.errors import InvalidResponse
from offer_engine.models import AnalysisResult, OfferInput
from offer_engine.transport.base import EngineTransport
from offer_engine.validation import validate_offer

LOGGER = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """You are a global career decision engine for senior professionals.
Analyze job offers with precision, accounting for tax law, cost of living, industry risk and purchasing power.

RULES:
1. REAL-TIME DATA: Use the search tool to find the latest tax rates, cost of living data and market salary benchmarks for the exact city and country. Prefer real data over estimates.
2. WHOLE NUMBERS: Every financial figure (salary, rent, savings, ...) MUST be an integer.
3. TAX: Apply realistic progressive tax for the target country (income tax + social security).
4. CITY TIERS: Tier 1 = major metro, Tier 2 = mid-size, Tier 3 = smaller city. Scale costs to the tier.
5. CURRENCY: Report local amounts in the offer currency. Give USD equivalents at the current approximate exchange rate.
6. INDUSTRY: Adjust risk and fairness scores to the industry (e.g. Finance vs Technology vs Healthcare).
7. PURCHASING POWER: When currentSalary and currentCountry are present, fill "comparison" and "scores.lifestyleImpact" with the real lifestyle change.
8. WORK-LIFE: Give country averages for weekly hours, minimum paid leave and public holidays.
9. WARNINGS: Add a "Cost Shock" warning if rent rises more than 80% or savings drop more than 30%.
10. FAIRNESS: Salary Fairness Score (0-100) against market data for role, location and experience.
11. CONFIDENCE: Decision confidence from data quality and stability.

Return ONE JSON document with exactly this shape:
{
  "financialBreakdown": {
    "monthlyNetIncome": integer,
    "yearlyNetIncome": integer,
    "taxAssumptions": "string",
    "effectiveTaxRate": number (0-100),
    "usdEquivalent": {"monthlyNet": integer, "yearlyNet": integer, "exchangeRate": number}
  },
  "costOfLiving": {
    "rent": integer, "utilities": integer, "food": integer, "transport": integer,
    "healthcare": integer, "insurance": integer, "misc": integer,
    "totalEssential": integer,
    "cityTier": 1 | 2 | 3
  },
  "savingsProjection": {"monthlyDisposable": integer, "monthlySavings": integer, "annualSavingsPotential": integer},
  "scores": {
    "purchasingPower": integer (1-10),
    "careerImpact": integer (1-10),
    "salaryFairness": integer (0-100),
    "workLifeBalance": integer (1-10),
    "lifestyleImpact": integer (0-100) (optional),
    "decisionConfidence": "Low" | "Medium" | "High"
  },
  "globalMetrics": {"avgWeeklyHours": number, "minPaidLeave": number, "publicHolidays": number},
  "riskAnalysis": {"level": "Low" | "Medium" | "High", "explanation": "string"},
  "warnings": ["string"],
  "negotiation": {
    "isCompetitive": boolean,
    "marketRange": "string",
    "suggestedNegotiationRange": "string",
    "weakComponents": ["string"],
    "negotiationItems": ["string"]
  },
  "comparison": {
    "purchasingPowerDiff": "string",
    "savingsPotentialDiff": "string",
    "realTermsChangePercent": number,
    "housingCostIncreasePercent": number
  } (optional),
  "verdict": {
    "decision": "ACCEPT" | "NEGOTIATE" | "REJECT" | "ACCEPT WITH CAUTION",
    "reasoning": "string",
    "strategicAdvice": "string",
    "actionPlan": ["string"]
  },
  "rawMarkdown": "A full, detailed markdown report (2000+ words)"
}

Be analytical, structured and decisive. No fluff."""


_WRAPPED = re.compile(r"```[A-Za-z]*\s*(.*?)\s*```", re.DOTALL)
_FENCE_OPEN = re.compile(r"```json\s*", re.IGNORECASE)
_DECODER = json.JSONDecoder()


def build_prompt(offer: OfferInput, today: date) -> str:
    """Serialise the offer plus today's date into the user message."""
    return (
        "Analyze the following job offer:\n"
        f"{json.dumps(offer.to_wire(), indent=2, ensure_ascii=False)}\n\n"
        f"Current Date: {today.isoformat()}\n"
        f"City/Country: {offer.city}, {offer.country}\n"
    )


def extract_json(text: str) -> str:
    """Strip a ```json / ``` fence if the engine wrapped its answer in one."""
    text = text.strip()
    wrapped = _WRAPPED.fullmatch(text)
    if wrapped:
        return wrapped.group(1)
    if text.startswith("{"):
        # rawMarkdown may hold its own fences; leave a bare document alone.
        return text
    opening = _FENCE_OPEN.search(text)
    if opening:
        # Decode from the fence onwards; the document itself may contain fences.
        try:
            _, end = _DECODER.raw_decode(text, opening.end())
        except json.JSONDecodeError:
            return text[opening.end():]
        return text[opening.end():end]
    return text


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors()[:5]:
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    more = error.error_count() - len(problems)
    if more > 0:
        problems.append(f"... and {more} more")
    return "; ".join(problems)


def parse_response(text: Optional[str]) -> AnalysisResult:
    """
    Turn raw engine text into a fully-typed AnalysisResult.

    Raises InvalidResponse for empty text, malformed JSON, a non-object document,
    missing fields or enum values outside their declared set.
    """
    if not text or not text.strip():
        raise InvalidResponse("The analysis engine returned an empty response.", raw=text)

    payload = extract_json(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise InvalidResponse(f"Malformed JSON from analysis engine: {e}", raw=text) from e

    if not isinstance(data, dict):
        raise InvalidResponse(
            f"Expected a JSON object from analysis engine, got {type(data).__name__}", raw=text
        )

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise InvalidResponse(f"Response does not match the result schema: {_describe(e)}", raw=text) from e


class AnalysisClient:
    """
    Builds the engine request, runs the attempt/fallback workflow and returns
    a validated AnalysisResult. Holds no per-call state, so concurrent
    ``analyze`` calls for different offers are safe.
    """

    def __init__(
        self,
        transport: EngineTransport,
        enable_search: bool = True,
        today: Callable[[], date] = date.today,
    ):
        self.transport = transport
        self.enable_search = enable_search
        self.today = today
        self.workflow = AnalysisWorkflow(transport, parse=parse_response)

    async def analyze(self, offer: OfferInput) -> AnalysisResult:
        """
        Analyze one offer.

        Raises OfferValidationError before any network call, then
        EngineUnavailable or InvalidResponse if the engine can't deliver.
        """
        offer = validate_offer(offer)
        prompt = build_prompt(offer, self.today())

        LOGGER.info(
            "Analyzing %s in %s, %s via %s",
            offer.job_title, offer.city, offer.country, self.transport.name
        )
        result = await self.workflow.run(prompt, SYSTEM_INSTRUCTION, use_search=self.enable_search)

        yearly_net = result.financial_breakdown.yearly_net_income
        if yearly_net < 0 or yearly_net >= offer.gross_annual_salary:
            LOGGER.warning(
                "Engine reported yearly net %s against gross %s for %s",
                yearly_net, offer.gross_annual_salary, offer.job_title
            )
        return result

    async def close(self):
        """Cleanup resources."""
        await self.transport.close()
