# trends_seasonality/insights.py
from __future__ import annotations
import logging, re
from typing import Callable, List, Optional

from .errors import EnhancementServiceError
from .metrics import (
    low_bucket,
    peak_bucket,
    recent_trend_direction,
    seasonal_variation,
)
from .models import TREND_DOWN, TREND_UP, AnalysisResult

logger = logging.getLogger(__name__)

STRONG_VARIATION_PCT = 50.0
MODERATE_VARIATION_PCT = 25.0
MIN_INSIGHT_CHARS = 20
MAX_INSIGHTS = 7

_DIRECTION_WORDS = {TREND_UP: "an upward", TREND_DOWN: "a declining"}


def _fmt(x: float) -> str:
    # 80.0 -> "80", 42.5 -> "42.5"
    return f"{x:.2f}".rstrip("0").rstrip(".")


# ----------------------------
# Template insights
# ----------------------------
def variation_insight(variation: Optional[float]) -> str:
    if variation is None:
        return ("Strong seasonal pattern: search interest drops to zero in the "
                "lowest month, so timing matters a great deal.")
    pct = f"{variation:.0f}%"
    if variation > STRONG_VARIATION_PCT:
        return (f"Strong seasonal pattern: search interest varies by {pct} "
                "between the peak and lowest months.")
    if variation > MODERATE_VARIATION_PCT:
        return (f"Moderate seasonal pattern: search interest varies by {pct} "
                "between the peak and lowest months.")
    return (f"Search interest is relatively stable throughout the year, "
            f"varying by only {pct} between the peak and lowest months.")

def trend_insight(direction: str) -> str:
    word = _DIRECTION_WORDS.get(direction)
    if word is None:
        return "Search interest has remained stable over recent years."
    return f"Recent years show {word} trend in search interest."

def generate_insights(result: AnalysisResult) -> List[str]:
    """
    Deterministic insights, in order:
      peak month, lowest month, seasonal variation, peak quarter, recent trend.
    """
    out: List[str] = []
    if result.monthly:
        peak = peak_bucket(result.monthly)
        low = low_bucket(result.monthly)
        out.append(f"Peak search interest occurs in {peak.month} "
                   f"with an average interest of {_fmt(peak.average_value)}.")
        out.append(f"Lowest search interest occurs in {low.month} "
                   f"with an average interest of {_fmt(low.average_value)}.")
        out.append(variation_insight(seasonal_variation(peak.average_value, low.average_value)))
    if result.quarterly:
        q = peak_bucket(result.quarterly)
        out.append(f"{q.quarter} is the strongest quarter, accounting for "
                   f"{_fmt(q.percentage)}% of total searches.")
    if result.yearly:
        out.append(trend_insight(recent_trend_direction(result.yearly)))
    return out


# ----------------------------
# Prompting + LLM I/O
# ----------------------------
SYSTEM_PROMPT = (
    "You are a marketing analytics expert specializing in seasonal trends and business strategy. "
    "Provide actionable, specific insights based on Google Trends data."
)

PROMPT_FOOTER = """Please provide 5-7 specific, actionable marketing insights. Focus on:
1. Strategic timing for campaigns and budget allocation
2. Market opportunities and competitive advantages
3. Consumer behavior patterns and motivations
4. Seasonal business planning recommendations
5. Risk mitigation for low-demand periods

Format each insight as a complete sentence that a marketing manager could immediately act upon. Avoid generic advice and focus on data-driven recommendations specific to this search pattern."""

def _prompt_direction(result: AnalysisResult) -> str:
    if len(result.yearly) < 2:
        return "insufficient data"
    return {TREND_UP: "growing", TREND_DOWN: "declining"}.get(
        recent_trend_direction(result.yearly), "stable")

def build_insights_prompt(result: AnalysisResult) -> str:
    peak = peak_bucket(result.monthly)
    low = low_bucket(result.monthly)
    q = peak_bucket(result.quarterly)
    monthly = ", ".join(f"{m.month}: {_fmt(m.average_value)}%" for m in result.monthly)
    quarterly = ", ".join(f"{x.quarter}: {_fmt(x.average_value)}%" for x in result.quarterly)
    dr = result.date_range
    return f"""Analyze this Google Trends data for "{result.keyword}" from {dr.start} to {dr.end}:

SEASONAL PATTERNS:
- Peak month: {peak.month} ({_fmt(peak.average_value)}% interest)
- Low month: {low.month} ({_fmt(low.average_value)}% interest)
- Peak quarter: {q.quarter} ({_fmt(q.percentage)}% of searches)
- Recent trend: {_prompt_direction(result)}

MONTHLY DATA:
{monthly}

QUARTERLY DATA:
{quarterly}

{PROMPT_FOOTER}"""

_ITEM_MARKER_RX = re.compile(r"(?m)^\s*(?:\d+[.)]|[•\-*])\s+")

def parse_insights_response(text: str) -> List[str]:
    """
    Split a numbered / bulleted reply into insights.
    Fragments of MIN_INSIGHT_CHARS or less are dropped, at most MAX_INSIGHTS kept;
    if nothing survives, the whole reply is one insight.
    """
    text = (text or "").strip()
    parts = [re.sub(r"\s+", " ", p).strip() for p in _ITEM_MARKER_RX.split(text)]
    items = [p for p in parts if len(p) > MIN_INSIGHT_CHARS][:MAX_INSIGHTS]
    return items if items else ([text] if text else [])


# ----------------------------
# Public entrypoint
# ----------------------------
def request_enhanced_insights(result: AnalysisResult, llm_call_fn: Callable[[str], str]) -> List[str]:
    """Call the enhancement service; EnhancementServiceError on any failure or empty reply."""
    prompt = build_insights_prompt(result)
    try:
        raw = llm_call_fn(prompt)
    except EnhancementServiceError:
        raise
    except Exception as e:
        raise EnhancementServiceError("Failed to generate AI insights.", e) from e
    items = parse_insights_response(raw or "")
    if not items:
        raise EnhancementServiceError("No response from the insight service")
    return items

def enhance_insights(result: AnalysisResult, llm_call_fn: Optional[Callable[[str], str]]) -> AnalysisResult:
    """
    New result whose insights come from `llm_call_fn` (you provide this function).
    Any failure keeps `result` as-is; it is logged, never raised.
    """
    if llm_call_fn is None:
        return result
    try:
        items = request_enhanced_insights(result, llm_call_fn)
    except EnhancementServiceError as e:
        logger.warning("Insight enhancement failed, keeping template insights: %s", e.message)
        return result
    logger.info("Enhanced insights received (%d items)", len(items))
    return result.with_insights(items)
