"""Ready-made deck recipes.

A recipe expands a handful of caller values (organisation, headline
figures, optional table data) into a complete instruction list. Every
value has a sensible default, so ``expand_recipe("quarterly_review")`` already
yields a full deck. Colours are palette roles, so a recipe renders in
either brand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .errors import UnknownRecipe

Values = Mapping[str, Any]


def _step(method: str, *params: Any) -> dict:
    return {"method": method, "params": list(params)}


def _cell(value: str, color: str) -> dict:
    return {"value": value, "color": color}


def investment_proposal(values: Values) -> list[dict]:
    amount = values.get("amount", "£10M")
    return [
        _step(
            "createTitleSlide",
            "Investment Proposal",
            values.get("investmentName", "Target Company Acquisition"),
            f"{amount} Investment Opportunity",
        ),
        _step(
            "createExecutiveSummary",
            "Executive Summary",
            [
                {"value": amount, "label": "Investment Size", "sublabel": "Equity stake"},
                {"value": values.get("targetReturn", "25%"), "label": "Target IRR", "sublabel": "5-year horizon", "highlight": True},
                {"value": values.get("closeDate", "Q2 2025"), "label": "Close Date", "sublabel": "Subject to DD"},
            ],
        ),
        _step(
            "createFrameworkSlide",
            "Investment Thesis",
            [
                {
                    "title": "Market Opportunity",
                    "content": values.get("marketOpp", "• Growing market at 15% CAGR\n• Fragmented competition\n• Clear consolidation play"),
                    "color": "primary",
                },
                {
                    "title": "Company Strengths",
                    "content": values.get(
                        "strengths",
                        "• Market leader position\n• Strong management team\n• Proprietary technology\n• Recurring revenue model",
                    ),
                    "color": "accent",
                },
                {
                    "title": "Value Creation",
                    "content": values.get(
                        "valueCreation",
                        "• Operational improvements\n• Geographic expansion\n• Strategic acquisitions\n• Digital transformation",
                    ),
                    "color": "highlight",
                },
            ],
        ),
        _step(
            "createTableSlide",
            "Financial Overview",
            ["Metric", "2023A", "2024A", "2025F", "2026F", "2027F"],
            values.get(
                "financials",
                [
                    ["Revenue (£M)", "50", "65", "85", "110", "140"],
                    ["EBITDA (£M)", "10", "14", "20", "28", "38"],
                    ["EBITDA Margin", "20%", "22%", "24%", "25%", "27%"],
                    ["Cash Flow (£M)", "8", "11", "16", "23", "32"],
                ],
            ),
        ),
        _step(
            "createTableSlide",
            "Risk Assessment",
            ["Risk Factor", "Impact", "Likelihood", "Mitigation"],
            values.get(
                "risks",
                [
                    ["Market downturn", _cell("High", "dataNegative"), "Medium", "Diversified revenue streams"],
                    ["Competition", _cell("Medium", "dataNeutral"), "High", "Strong differentiation"],
                    ["Execution", _cell("Medium", "dataNeutral"), "Low", "Experienced team"],
                    ["Regulatory", _cell("Low", "dataPositive"), "Low", "Compliance framework"],
                ],
            ),
        ),
        _step(
            "createTimeline",
            "Transaction Timeline",
            values.get(
                "timeline",
                [
                    {"period": "Month 1", "title": "DUE DILIGENCE", "color": "primary"},
                    {"period": "Month 2", "title": "NEGOTIATION", "color": "accent"},
                    {"period": "Month 3", "title": "DOCUMENTATION", "color": "highlight"},
                    {"period": "Month 4", "title": "CLOSING", "color": "dataPositive"},
                ],
            ),
        ),
        _step(
            "createKeyMessages",
            "Key Messages",
            values.get(
                "keyMessages",
                [
                    "Compelling investment opportunity with 25% target IRR",
                    "Strong market position in growing sector",
                    "Clear value creation plan identified",
                    "Experienced management team in place",
                    "Risks identified and mitigation strategies defined",
                ],
            ),
        ),
    ]


def quarterly_review(values: Values) -> list[dict]:
    quarter = str(values.get("quarter") or "").strip() or "Q4 2025"
    return [
        _step("createTitleSlide", "Quarterly Business", "Review", f"{quarter} Performance & Outlook"),
        _step(
            "createExecutiveSummary",
            f"{quarter.split()[0]} Performance Highlights",
            [
                {"value": values.get("revenue", "£25.5M"), "label": "Revenue", "sublabel": "+12% vs PY"},
                {"value": values.get("ebitda", "£5.2M"), "label": "EBITDA", "sublabel": "20.4% margin", "highlight": True},
                {"value": values.get("nps", "72"), "label": "NPS Score", "sublabel": "+8 points"},
            ],
        ),
        _step(
            "createTableSlide",
            "Performance vs Plan",
            ["Metric", "Actual", "Plan", "Variance", "Prior Year"],
            values.get(
                "performance",
                [
                    ["Revenue", "£25.5M", "£24.0M", _cell("+6%", "dataPositive"), "£22.8M"],
                    ["Gross Margin", "42%", "40%", _cell("+2pp", "dataPositive"), "39%"],
                    ["EBITDA", "£5.2M", "£5.0M", _cell("+4%", "dataPositive"), "£4.3M"],
                    ["Headcount", "245", "250", _cell("-2%", "dataNeutral"), "220"],
                ],
            ),
        ),
        _step(
            "createFrameworkSlide",
            "Key Achievements",
            [
                {
                    "title": "Revenue Growth",
                    "content": "• Exceeded plan by 6%\n• New product line success\n• Geographic expansion\n• Key account wins",
                    "color": "dataPositive",
                },
                {
                    "title": "Operational Excellence",
                    "content": "• Margin improvement +2pp\n• Cost reduction programme\n• Process automation\n• Quality metrics improved",
                    "color": "accent",
                },
                {
                    "title": "Strategic Progress",
                    "content": "• Digital transformation 60% complete\n• Partnership agreements signed\n• New market entry\n• Team capability built",
                    "color": "primary",
                },
            ],
        ),
        _step(
            "createTimeline",
            "Next Quarter Priorities",
            values.get(
                "priorities",
                [
                    {"period": "Immediate", "title": "SALES PIPELINE", "details": "Close £8M deals"},
                    {"period": "Month 1", "title": "PRODUCT LAUNCH", "details": "Version 2.0 release"},
                    {"period": "Quarter", "title": "COST OPTIMISATION", "details": "£500k savings"},
                    {"period": "Ongoing", "title": "TALENT", "details": "Key hires"},
                ],
            ),
        ),
        _step(
            "createKeyMessages",
            "Key Messages",
            values.get(
                "keyMessages",
                [
                    f"Strong {quarter} performance exceeded expectations",
                    "Full year targets achieved across all metrics",
                    "Strategic initiatives progressing on schedule",
                    "Pipeline robust for continued growth",
                    "Team engaged and capability growing",
                ],
            ),
        ),
    ]


def strategy_plan(values: Values) -> list[dict]:
    return [
        _step(
            "createTitleSlide",
            "Strategic Plan",
            values.get("period", "2026-2029"),
            values.get("subtitle", "Accelerating Growth Through Innovation"),
        ),
        _step(
            "createExecutiveSummary",
            "Strategic Objectives",
            [
                {"value": values.get("revenueTarget", "£100M"), "label": "Revenue Target", "sublabel": "By end of plan"},
                {"value": values.get("marginTarget", "25%"), "label": "EBITDA Margin", "sublabel": "Industry leading", "highlight": True},
                {"value": "#1", "label": "Market Position", "sublabel": "In key segments"},
            ],
        ),
        _step(
            "createTableSlide",
            "Market Opportunity Analysis",
            ["Segment", "Market Size", "Growth Rate", "Our Share", "Opportunity"],
            values.get(
                "markets",
                [
                    ["Enterprise", "£500M", "8%", "12%", _cell("High", "dataPositive")],
                    ["Mid-Market", "£300M", "12%", "8%", _cell("High", "dataPositive")],
                    ["SMB", "£200M", "15%", "3%", _cell("Medium", "dataNeutral")],
                    ["Public Sector", "£150M", "5%", "2%", _cell("Low", "dataNegative")],
                ],
            ),
        ),
        _step(
            "createFrameworkSlide",
            "Strategic Pillars",
            [
                {
                    "title": "Customer Excellence",
                    "content": "• Enhance customer experience\n• Expand service portfolio\n• Deepen relationships\n• Improve retention to 95%",
                    "color": "primary",
                },
                {
                    "title": "Operational Efficiency",
                    "content": "• Automate core processes\n• Optimise cost structure\n• Improve margins by 5pp\n• Scale infrastructure",
                    "color": "accent",
                },
                {
                    "title": "Innovation & Growth",
                    "content": "• Launch 3 new products\n• Enter 2 new markets\n• Strategic partnerships\n• Digital transformation",
                    "color": "highlight",
                },
            ],
        ),
        _step(
            "createTimeline",
            "Implementation Roadmap",
            values.get(
                "roadmap",
                [
                    {"period": "Year 1", "title": "FOUNDATION", "details": "Systems & capabilities"},
                    {"period": "Year 2", "title": "EXPANSION", "details": "New markets & products"},
                    {"period": "Year 3", "title": "SCALE", "details": "Accelerate growth"},
                    {"period": "Year 4", "title": "LEADERSHIP", "details": "Market position"},
                ],
            ),
        ),
        _step(
            "createTableSlide",
            "Investment Requirements",
            ["Category", "Year 1", "Year 2", "Year 3", "Year 4", "Total"],
            [
                ["Technology", "£2M", "£3M", "£2M", "£1M", "£8M"],
                ["People", "£1M", "£2M", "£2M", "£1M", "£6M"],
                ["Marketing", "£1M", "£1M", "£2M", "£2M", "£6M"],
                ["Operations", "£1M", "£1M", "£1M", "£2M", "£5M"],
                [{"value": "Total", "bold": True}, "£5M", "£7M", "£7M", "£6M", {"value": "£25M", "bold": True}],
            ],
        ),
        _step(
            "createKeyMessages",
            "Key Messages",
            values.get(
                "keyMessages",
                [
                    "Clear path to revenue target by end of plan",
                    "Strategy builds on core strengths",
                    "Investment required but self-funding by year 2",
                    "Risks identified with mitigation plans",
                    "Board approval requested to proceed",
                ],
            ),
        ),
    ]


@dataclass(frozen=True)
class Recipe:
    name: str
    description: str
    expand: Callable[[Values], list[dict]]
    default_organisation: str = "Your Company"


RECIPES: Mapping[str, Recipe] = {
    r.name: r
    for r in (
        Recipe("investment_proposal", "Investment proposal: thesis, financials, risks, timeline", investment_proposal, "Investment Fund"),
        Recipe("quarterly_review", "Quarterly business review: KPIs, performance vs plan, priorities", quarterly_review),
        Recipe("strategy_plan", "Multi-year strategic plan: objectives, markets, pillars, roadmap", strategy_plan),
    )
}


def get_recipe(name: str) -> Recipe:
    recipe = RECIPES.get(str(name or "").strip().lower())
    if recipe is None:
        raise UnknownRecipe(str(name), list(RECIPES))
    return recipe


def expand_recipe(name: str, values: Values | None = None, config: Mapping[str, Any] | None = None) -> tuple[dict, list[dict]]:
    """Return ``(config, instructions)`` for recipe *name*."""
    recipe = get_recipe(name)
    values = dict(values or {})
    merged = {"organisation": values.get("organisation", recipe.default_organisation)}
    if values.get("spelling"):
        merged["spelling"] = values["spelling"]
    merged.update(config or {})
    return merged, recipe.expand(values)
