"""Core models - offers in, assessments out."""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


Industry = Literal[
    "Technology",
    "Healthcare",
    "Finance",
    "Engineering",
    "Education",
    "Government",
    "Logistics",
    "Marketing",
    "Manufacturing",
    "Other",
]
CareerGoal = Literal["Money", "Growth", "Stability", "Relocation", "Brand Value"]
HealthInsurance = Literal["Full", "Partial", "None"]
Level = Literal["Low", "Medium", "High"]
Decision = Literal["ACCEPT", "NEGOTIATE", "REJECT", "ACCEPT WITH CAUTION"]

Number = Union[int, float]


def _whole_number(value):
    """Repair engine numbers: '90,000' -> 90000, 1234.6 -> 1235."""
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        try:
            value = float(value)
        except ValueError:
            return value  # let pydantic report it
    if isinstance(value, float):
        return round(value)
    return value


# Money figures are always whole numbers on the result side.
WholeNumber = Annotated[int, BeforeValidator(_whole_number)]
Money = Annotated[int, BeforeValidator(_whole_number), Field(ge=0)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and on disk. Values are immutable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# --- Input ---------------------------------------------------------------


class OfferInput(CamelModel):
    """One job offer under evaluation. Pure data; see validation.validate_offer."""

    job_title: str = ""
    company_name: Optional[str] = None
    country: str = ""
    city: str = ""
    gross_annual_salary: Number = 0
    currency: str = "USD"
    bonus_structure: str = ""
    signing_bonus: Number = 0
    equity_details: str = ""
    employment_type: str = "Full-time"
    work_hours_per_week: Number = 40
    visa_required: bool = False
    health_insurance: HealthInsurance = "Full"
    relocation_package: str = ""
    estimated_monthly_rent: Optional[Number] = None
    current_salary: Optional[Number] = None
    current_country: Optional[str] = None
    years_of_experience: Number = 0
    industry: Industry = "Technology"
    career_goal: CareerGoal = "Growth"

    @property
    def has_benchmark(self) -> bool:
        """Whether the user supplied their present situation for comparison."""
        return bool(self.current_salary) and bool(self.current_country)


# --- Assessment ----------------------------------------------------------


class UsdEquivalent(CamelModel):
    monthly_net: WholeNumber
    yearly_net: WholeNumber
    exchange_rate: float = Field(gt=0)


class FinancialBreakdown(CamelModel):
    monthly_net_income: WholeNumber
    yearly_net_income: WholeNumber
    tax_assumptions: str
    effective_tax_rate: float = Field(ge=0, le=100)
    usd_equivalent: UsdEquivalent


class CostOfLiving(CamelModel):
    rent: Money
    utilities: Money
    food: Money
    transport: Money
    healthcare: Money
    insurance: Money
    misc: Money
    total_essential: Money
    city_tier: Literal[1, 2, 3]


class SavingsProjection(CamelModel):
    # Savings can go negative when essentials exceed net income.
    monthly_disposable: WholeNumber
    monthly_savings: WholeNumber
    annual_savings_potential: WholeNumber


class Scores(CamelModel):
    purchasing_power: WholeNumber = Field(ge=1, le=10)
    career_impact: WholeNumber = Field(ge=1, le=10)
    salary_fairness: WholeNumber = Field(ge=0, le=100)
    work_life_balance: WholeNumber = Field(ge=1, le=10)
    lifestyle_impact: Optional[WholeNumber] = Field(default=None, ge=0, le=100)
    decision_confidence: Level


class GlobalMetrics(CamelModel):
    avg_weekly_hours: float = Field(ge=0)
    min_paid_leave: float = Field(ge=0)
    public_holidays: float = Field(ge=0)


class RiskAnalysis(CamelModel):
    level: Level
    explanation: str


class Negotiation(CamelModel):
    is_competitive: bool
    market_range: str
    suggested_negotiation_range: str
    weak_components: list[str]
    negotiation_items: list[str]


class BenchmarkComparison(CamelModel):
    """Present situation vs. offer. Only filled when benchmarking fields were sent."""

    purchasing_power_diff: str
    savings_potential_diff: str
    real_terms_change_percent: float
    housing_cost_increase_percent: float


class Verdict(CamelModel):
    decision: Decision
    reasoning: str
    strategic_advice: str
    action_plan: list[str]


class AnalysisResult(CamelModel):
    """One engine assessment."""

    financial_breakdown: FinancialBreakdown
    cost_of_living: CostOfLiving
    savings_projection: SavingsProjection
    scores: Scores
    global_metrics: GlobalMetrics
    risk_analysis: RiskAnalysis
    warnings: list[str]
    negotiation: Negotiation
    comparison: Optional[BenchmarkComparison] = None
    verdict: Verdict
    raw_markdown: str


# --- Archive -------------------------------------------------------------


class SavedOffer(CamelModel):
    """An archived (input, result) pair. Immutable once created."""

    id: str
    input: OfferInput
    result: AnalysisResult
    timestamp: datetime
