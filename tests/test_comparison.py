"""Tests for the side-by-side comparison table."""
from __future__ import annotations

import pytest

from conftest import make_saved
from offer_engine.errors import SelectionLimitExceeded
from offer_engine.ranking.comparison import ComparisonEngine, score_tone, toggle_selection, verdict_tone


EXPECTED_LABELS = [
    "Annual Net Salary",
    "Effective Tax Rate",
    "Monthly Savings",
    "Fairness Score",
    "Career Impact",
    "Work-Life Balance",
    "Rent (Monthly)",
    "Food (Monthly)",
    "Transport (Monthly)",
    "Healthcare (Monthly)",
    "Risk Level",
    "Confidence",
    "Verdict",
]


def records():
    return [
        make_saved("eur", currency="EUR", yearly_net=55800, city="Berlin"),
        make_saved("gbp", currency="GBP", yearly_net=61250, city="London", decision="REJECT"),
        make_saved("chf", currency="CHF", yearly_net=98000, city="Zurich", decision="NEGOTIATE"),
        make_saved("usd", currency="USD", yearly_net=120000, city="Austin"),
    ]


def test_rows_follow_the_fixed_metric_order() -> None:
    table = ComparisonEngine().project(records(), ["eur"])
    assert [row.label for row in table.rows] == EXPECTED_LABELS


def test_annual_net_uses_each_offers_own_currency_in_selection_order() -> None:
    table = ComparisonEngine().project(records(), ["chf", "eur", "gbp"])

    row = table.row("yearlyNetIncome")
    assert [cell.display for cell in row.cells] == ["CHF 98,000", "EUR 55,800", "GBP 61,250"]
    assert [cell.value for cell in row.cells] == [98000, 55800, 61250]
    assert [column.offer_id for column in table.columns] == ["chf", "eur", "gbp"]
    assert [column.city for column in table.columns] == ["Zurich", "Berlin", "London"]


def test_cell_formats() -> None:
    table = ComparisonEngine().project(records(), ["eur"])
    display = {row.key: row.cells[0].display for row in table.rows}

    assert display == {
        "yearlyNetIncome": "EUR 55,800",
        "effectiveTaxRate": "38%",
        "monthlySavings": "EUR 1,500",
        "salaryFairness": "74%",
        "careerImpact": "8/10",
        "workLifeBalance": "8/10",
        "rent": "EUR 1,400",
        "food": "EUR 450",
        "transport": "EUR 60",
        "healthcare": "EUR 0",
        "level": "Low",
        "decisionConfidence": "High",
        "decision": "ACCEPT",
    }


def test_verdict_and_fairness_tones() -> None:
    table = ComparisonEngine().project(records(), ["eur", "gbp", "chf"])

    assert [c.tone for c in table.row("decision").cells] == ["positive", "negative", "caution"]
    assert [c.tone for c in table.row("salaryFairness").cells] == ["positive"] * 3
    assert [c.tone for c in table.row("yearlyNetIncome").cells] == ["highlight"] * 3
    assert table.row("rent").cells[0].tone is None


def test_tone_helpers() -> None:
    assert verdict_tone("ACCEPT WITH CAUTION") == "caution"
    assert verdict_tone("NEGOTIATE") == "caution"
    assert [score_tone(s) for s in (100, 71, 70, 41, 40, 0)] == [
        "positive", "positive", "caution", "caution", "negative", "negative"
    ]


def test_selection_over_the_limit_is_rejected() -> None:
    with pytest.raises(SelectionLimitExceeded):
        ComparisonEngine().project(records(), ["eur", "gbp", "chf", "usd"])


def test_selection_at_the_limit_projects_exactly_those_records() -> None:
    table = ComparisonEngine().project(records(), ["usd", "gbp", "eur"])
    assert [c.offer_id for c in table.columns] == ["usd", "gbp", "eur"]
    assert all(len(row.cells) == 3 for row in table.rows)


def test_unknown_ids_are_skipped() -> None:
    table = ComparisonEngine().project(records(), ["gone", "eur"])
    assert [c.offer_id for c in table.columns] == ["eur"]


def test_projection_is_deterministic() -> None:
    engine = ComparisonEngine()
    assert engine.project(records(), ["gbp", "eur"]) == engine.project(records(), ["gbp", "eur"])


def test_configurable_limit() -> None:
    table = ComparisonEngine(max_selection=4).project(records(), ["eur", "gbp", "chf", "usd"])
    assert len(table.columns) == 4
    with pytest.raises(SelectionLimitExceeded):
        ComparisonEngine().project(records(), ["eur", "gbp"], max_selection=1)


def test_toggle_selection() -> None:
    selection: list[str] = []
    for offer_id in ("a", "b", "c", "d"):
        selection = toggle_selection(selection, offer_id)
    assert selection == ["a", "b", "c"]

    selection = toggle_selection(selection, "b")
    assert selection == ["a", "c"]
    assert toggle_selection(selection, "d") == ["a", "c", "d"]
