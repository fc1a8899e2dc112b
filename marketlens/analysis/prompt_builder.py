"""Build model-facing prompts for market analysis."""

from datetime import date
from typing import List, Optional

from marketlens.analysis.category import category_data_requirements
from marketlens.analysis.models import MarketOutcome
from marketlens.pricing.models import CryptoTechnicalData
from marketlens.utils.helpers import format_signed

ANALYSIS_TOOL_NAME = "submit_market_analysis"


def _long_date(today: date, with_weekday: bool = False) -> str:
    text = f"{today:%B} {today.day}, {today.year}"
    if with_weekday:
        return f"{today:%A}, {text}"
    return text


def build_system_prompt(
    outcome_labels: List[str], category: str, today: Optional[date] = None
) -> str:
    """Build the system prompt constraining a model to the valid outcomes.

    Args:
        outcome_labels: Labels the model may assign probabilities to
        category: Detected market category
        today: Date to state in the prompt. Defaults to today.

    Returns:
        System prompt text
    """
    today = today or date.today()
    return f"""You are a prediction market analyst. Today is {_long_date(today)}.

CRITICAL RULES:
1. You may ONLY assign probabilities to these outcomes: {", ".join(outcome_labels)}
2. Do NOT invent product names, companies, initiatives, or statistics not provided
3. If a fact cannot be verified from the provided data, label it as an ASSUMPTION
4. Be calibrated: avoid extreme probabilities (>90% or <10%) unless strongly justified

{category_data_requirements(category)}

Use the {ANALYSIS_TOOL_NAME} tool to provide your structured response."""


def build_crypto_block(crypto_data: CryptoTechnicalData) -> str:
    """Format live price data for the prompt."""
    return f"""**Live {crypto_data.symbol} Data:**
- Current Price: ${crypto_data.current_price:.2f}
- 24h Change: {format_signed(crypto_data.price_change_percent_24h)}%
- 24h Range: ${crypto_data.low_24h:.2f} - ${crypto_data.high_24h:.2f}
- Technical: {crypto_data.technical_summary}"""


def build_analysis_prompt(
    market_title: str,
    outcomes: List[MarketOutcome],
    volume: Optional[str],
    crypto_data: Optional[CryptoTechnicalData] = None,
    today: Optional[date] = None,
) -> str:
    """Build the user prompt describing the market to analyze.

    Args:
        market_title: Market question
        outcomes: Normalized market outcomes
        volume: Trading volume as supplied by the caller
        crypto_data: Optional live price enrichment
        today: Date to state in the prompt. Defaults to today.

    Returns:
        Formatted prompt string
    """
    today = today or date.today()
    labels = ", ".join(o.label for o in outcomes)

    parts = [
        f"**Today's Date: {_long_date(today, with_weekday=True)}**",
        "",
        f"**Market Question:** {market_title}",
        "",
        f"**Available Outcomes:** {labels}",
        "",
        "**Current Market Prices:**",
    ]
    for outcome in outcomes:
        parts.append(f"- {outcome.label}: {outcome.yes_price * 100:.1f}%")
    parts.append(f"- Trading volume: ${volume if volume is not None else 'N/A'}")

    if crypto_data:
        parts.append("")
        parts.append(build_crypto_block(crypto_data))

    parts.append("")
    parts.append(
        f"Analyze this market and provide probability estimates for EACH of these outcomes: {labels}"
    )
    parts.append("")
    parts.append(
        "IMPORTANT: Only use the outcomes listed above. Do not introduce new outcomes."
    )

    return "\n".join(parts)
