"""Side-by-side comparison of archived offers."""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from offer_engine.errors import SelectionLimitExceeded
from offer_engine.models import CamelModel, SavedOffer


MAX_SELECTION = 3


class ComparisonColumn(CamelModel):
    offer_id: str
    job_title: str
    company_name: Optional[str] = None
    city: str
    country: str
    currency: str


class ComparisonCell(CamelModel):
    offer_id: str
    value: Any
    display: str
    tone: Optional[str] = None  # positive | caution | negative | highlight


class ComparisonRow(CamelModel):
    key: str
    label: str
    cells: list[ComparisonCell]


class ComparisonTable(CamelModel):
    """Rows in fixed metric order, columns in selection order."""

    columns: list[ComparisonColumn]
    rows: list[ComparisonRow]

    def row(self, key: str) -> ComparisonRow:
        return next(r for r in self.rows if r.key == key)


def money(value: int, offer: SavedOffer) -> str:
    """Amount in the offer's own currency. No cross-currency conversion."""
    return f"{offer.input.currency} {value:,}"


def percent(value, offer: SavedOffer) -> str:
    return f"{value:g}%"


def out_of_ten(value, offer: SavedOffer) -> str:
    return f"{value}/10"


def as_is(value, offer: SavedOffer) -> str:
    return str(value)


def verdict_tone(decision: str) -> str:
    if decision == "ACCEPT":
        return "positive"
    if decision == "REJECT":
        return "negative"
    return "caution"


def score_tone(score: float) -> str:
    """Colour band for 0-100 scores."""
    if score >= 71:
        return "positive"
    if score >= 41:
        return "caution"
    return "negative"


@dataclass(frozen=True)
class Metric:
    key: str
    label: str
    extract: Callable[[SavedOffer], Any]
    format: Callable[[Any, SavedOffer], str]
    tone: Optional[Callable[[Any], Optional[str]]] = None


METRICS: tuple[Metric, ...] = (
    Metric("yearlyNetIncome", "Annual Net Salary",
           lambda o: o.result.financial_breakdown.yearly_net_income, money, lambda v: "highlight"),
    Metric("effectiveTaxRate", "Effective Tax Rate",
           lambda o: o.result.financial_breakdown.effective_tax_rate, percent),
    Metric("monthlySavings", "Monthly Savings",
           lambda o: o.result.savings_projection.monthly_savings, money),
    Metric("salaryFairness", "Fairness Score",
           lambda o: o.result.scores.salary_fairness, percent, score_tone),
    Metric("careerImpact", "Career Impact",
           lambda o: o.result.scores.career_impact, out_of_ten),
    Metric("workLifeBalance", "Work-Life Balance",
           lambda o: o.result.scores.work_life_balance, out_of_ten),
    Metric("rent", "Rent (Monthly)",
           lambda o: o.result.cost_of_living.rent, money),
    Metric("food", "Food (Monthly)",
           lambda o: o.result.cost_of_living.food, money),
    Metric("transport", "Transport (Monthly)",
           lambda o: o.result.cost_of_living.transport, money),
    Metric("healthcare", "Healthcare (Monthly)",
           lambda o: o.result.cost_of_living.healthcare, money),
    Metric("level", "Risk Level",
           lambda o: o.result.risk_analysis.level, as_is),
    Metric("decisionConfidence", "Confidence",
           lambda o: o.result.scores.decision_confidence, as_is),
    Metric("decision", "Verdict",
           lambda o: o.result.verdict.decision, as_is, verdict_tone),
)


def check_selection(selection: Sequence[str], max_selection: int = MAX_SELECTION) -> None:
    if len(selection) > max_selection:
        raise SelectionLimitExceeded(len(selection), max_selection)


def toggle_selection(selection: Sequence[str], offer_id: str, max_selection: int = MAX_SELECTION) -> list[str]:
    """
    Picker behaviour: deselect if already chosen, append if there's room,
    otherwise leave the selection alone.
    """
    current = list(selection)
    if offer_id in current:
        return [i for i in current if i != offer_id]
    if len(current) < max_selection:
        return current + [offer_id]
    return current


class ComparisonEngine:
    """
    Projects a fixed set of metrics for up to ``max_selection`` archived offers.

    Pure: same records and selection always give the same table. Nothing is
    ranked or converted; each column keeps its own currency.
    """

    def __init__(self, max_selection: int = MAX_SELECTION, metrics: Sequence[Metric] = METRICS):
        self.max_selection = max_selection
        self.metrics = tuple(metrics)

    def project(
        self,
        records: Iterable[SavedOffer],
        selection: Sequence[str],
        max_selection: Optional[int] = None,
    ) -> ComparisonTable:
        """Build the table for ``selection``. Ids missing from ``records`` are skipped."""
        limit = self.max_selection if max_selection is None else max_selection
        selection = list(dict.fromkeys(selection))
        check_selection(selection, limit)

        by_id = {record.id: record for record in records}
        chosen = [by_id[offer_id] for offer_id in selection if offer_id in by_id]

        columns = [
            ComparisonColumn(
                offer_id=o.id,
                job_title=o.input.job_title,
                company_name=o.input.company_name,
                city=o.input.city,
                country=o.input.country,
                currency=o.input.currency,
            )
            for o in chosen
        ]
        rows = [
            ComparisonRow(
                key=metric.key,
                label=metric.label,
                cells=[self._cell(metric, o) for o in chosen],
            )
            for metric in self.metrics
        ]
        return ComparisonTable(columns=columns, rows=rows)

    def _cell(self, metric: Metric, offer: SavedOffer) -> ComparisonCell:
        value = metric.extract(offer)
        return ComparisonCell(
            offer_id=offer.id,
            value=value,
            display=metric.format(value, offer),
            tone=metric.tone(value) if metric.tone else None,
        )
