"""
AI-assisted narrative over a reconciliation run, using structured outputs.

Uses Pydantic models to ensure LLM outputs are well-structured
and can be programmatically processed.
"""

from typing import Literal
from pydantic import BaseModel, Field
from openai import OpenAI
import json

from . import settings
from .reconciliation import MatchReport
from .records import ReconciliationOutput


class StockAlert(BaseModel):
    """An item whose stock or sales pattern needs attention."""

    item_name: str
    current_stock: float = Field(description="Stock on hand in the item's base unit")
    total_sold: float = Field(description="Sold quantity in the item's base unit")
    issue: Literal["out_of_stock", "low_stock", "no_sales", "sales_exceed_receipts"]
    recommendation: str = Field(description="Specific action to take")


class SourceDiscrepancy(BaseModel):
    """A place where movement logging and POS data disagree."""

    description: str = Field(description="What disagrees and where")
    likely_cause: str = Field(description="Most probable reason for the discrepancy")
    priority: Literal["high", "medium", "low"]


class DataQualityRecommendation(BaseModel):
    """A recommendation for fixing data quality issues."""

    source: Literal["Catalog", "Movements", "Sales", "Orders", "Receiving"]
    issue: str = Field(description="The data quality problem")
    business_impact: str = Field(description="Why this matters to the venue")
    fix_recommendation: str = Field(description="What the venue should do")
    priority: Literal["critical", "high", "medium", "low"]


class InventoryHealthReport(BaseModel):
    """Complete AI-generated inventory health narrative."""

    executive_summary: str = Field(
        description="2-3 sentence summary for a venue manager"
    )
    stock_alerts: list[StockAlert] = Field(
        description="Items that need reordering or investigation"
    )
    source_discrepancies: list[SourceDiscrepancy] = Field(
        description="Disagreements between movement logs and POS sales"
    )
    data_quality_recommendations: list[DataQualityRecommendation] = Field(
        description="What to fix in the source systems"
    )


class InsightGenerator:
    """
    Generates an inventory health narrative with an LLM.

    What to trust vs verify:
    - TRUST: Pattern synthesis, natural language generation
    - VERIFY: Specific numbers (always computed by the engine and passed in)
    """

    def __init__(self, model: str = settings.OPENAI_MODEL, client: OpenAI | None = None):
        self.client = client or OpenAI()
        self.model = model

    def generate_report(
        self,
        output: ReconciliationOutput,
        key_metrics: dict,
        match_reports: list[MatchReport] | None = None,
        quality_issues: list[dict] | None = None,
    ) -> InventoryHealthReport:
        """Generate a structured report from a pre-computed reconciliation run."""
        prompt = self.build_prompt(output, key_metrics, match_reports, quality_issues)

        response = self.client.beta.chat.completions.parse(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": """You are a hospitality inventory analyst helping a bar or restaurant manager.

Your job is to:
1. Interpret the reconciled stock, sales and profit figures provided
2. Flag items that need reordering or a stock count
3. Point out where movement logs and POS sales disagree
4. Recommend fixes to the data sources

Spirit quantities are in bottles; fractional values are poured servings.
Use the numbers exactly as given. Be direct and specific.""",
                },
                {"role": "user", "content": prompt},
            ],
            response_format=InventoryHealthReport,
        )

        return response.choices[0].message.parsed

    def build_prompt(
        self,
        output: ReconciliationOutput,
        key_metrics: dict,
        match_reports: list[MatchReport] | None = None,
        quality_issues: list[dict] | None = None,
    ) -> str:
        """Build the prompt with all the pre-computed data."""
        data = output.to_dict()
        matches = [r.summary() | {"unmatched_names": r.unmatched_names[:20]} for r in match_reports or []]

        return f"""Analyze this venue's reconciled inventory and generate a health report.

## Key Metrics (pre-computed, use these exact numbers)
{json.dumps(key_metrics, indent=2)}

## Item Summaries
{json.dumps(data["items"][:50], indent=2)}

## Daily Summaries (newest first)
{json.dumps(data["daily"][:14], indent=2)}

## Financial Totals
{json.dumps(data["financials"], indent=2)}

## Name Matching Against the Catalog
{json.dumps(matches, indent=2)}

## Data Quality Issues Found
{json.dumps(quality_issues or [], indent=2, default=str)}

Generate a complete InventoryHealthReport with:
1. A 2-3 sentence executive summary
2. Stock alerts with specific actions
3. Discrepancies between movement logs and POS sales
4. Data quality fixes prioritized by impact"""
