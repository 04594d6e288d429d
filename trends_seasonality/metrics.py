# trends_seasonality/metrics.py
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from .models import (
    MONTH_NAMES,
    QUARTER_NAMES,
    TREND_DOWN,
    TREND_STABLE,
    TREND_UP,
    AnalysisResult,
    DateRange,
    MonthlyBucket,
    QuarterlyBucket,
    SeriesMetadata,
    TimeSeriesPoint,
    YearlyBucket,
    points_to_frame,
)

TREND_THRESHOLD_PCT = 5.0
RECENT_YEARS = 3

B = TypeVar("B")


def _round2(x: float) -> float:
    return float(round(float(x), 2))


# ----------------------------
# Pass 1: group + total
# ----------------------------
def period_totals(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """
    One row per period present in `df[key]` (no zero-filling), ascending by key:
      period, average_value (2dp), total_searches (raw sum), n
    """
    agg = df.groupby(key, sort=True).agg(
        average_value=("value", "mean"),
        total_searches=("value", "sum"),
        n=("value", "size"),
    ).reset_index().rename(columns={key: "period"})
    agg["period"] = agg["period"].astype(int)
    agg["average_value"] = agg["average_value"].map(_round2)
    agg["total_searches"] = agg["total_searches"].astype(float)
    return agg


# ----------------------------
# Pass 2: derived columns
# ----------------------------
def attach_percentages(totals: pd.DataFrame) -> pd.DataFrame:
    """Share of the grouping's own grand total, in percent (2dp). Needs every total first."""
    out = totals.copy()
    grand = float(out["total_searches"].sum())
    if grand == 0:
        out["percentage"] = 0.0
    else:
        out["percentage"] = (out["total_searches"] / grand * 100).map(_round2)
    return out

def trend_label(current_avg: float, previous_avg: float) -> str:
    if previous_avg == 0:
        return TREND_UP if current_avg > 0 else TREND_STABLE
    change = (current_avg - previous_avg) / previous_avg * 100
    if change > TREND_THRESHOLD_PCT:
        return TREND_UP
    if change < -TREND_THRESHOLD_PCT:
        return TREND_DOWN
    return TREND_STABLE

def attach_trends(totals: pd.DataFrame) -> pd.DataFrame:
    # compares rounded yearly averages; the first year has no predecessor
    out = totals.sort_values("period").reset_index(drop=True)
    avgs = out["average_value"].tolist()
    out["trend"] = [TREND_STABLE] + [trend_label(cur, prev) for prev, cur in zip(avgs, avgs[1:])]
    return out


# ----------------------------
# Buckets
# ----------------------------
def monthly_buckets(df: pd.DataFrame) -> List[MonthlyBucket]:
    tbl = attach_percentages(period_totals(df, "month"))
    return [
        MonthlyBucket(
            month=MONTH_NAMES[r.period - 1],
            month_number=int(r.period),
            average_value=float(r.average_value),
            total_searches=float(r.total_searches),
            percentage=float(r.percentage),
        )
        for r in tbl.itertuples(index=False)
    ]

def quarterly_buckets(df: pd.DataFrame) -> List[QuarterlyBucket]:
    tbl = attach_percentages(period_totals(df, "quarter"))
    return [
        QuarterlyBucket(
            quarter=QUARTER_NAMES[r.period - 1],
            quarter_number=int(r.period),
            average_value=float(r.average_value),
            total_searches=float(r.total_searches),
            percentage=float(r.percentage),
        )
        for r in tbl.itertuples(index=False)
    ]

def yearly_buckets(df: pd.DataFrame) -> List[YearlyBucket]:
    tbl = attach_trends(period_totals(df, "year"))
    return [
        YearlyBucket(
            year=int(r.period),
            average_value=float(r.average_value),
            total_searches=float(r.total_searches),
            trend=r.trend,
        )
        for r in tbl.itertuples(index=False)
    ]


# ----------------------------
# Peak / low / recent direction
# ----------------------------
def peak_bucket(buckets: Sequence[B]) -> B:
    """Highest average_value; ties keep the earliest bucket."""
    vals = np.array([b.average_value for b in buckets], dtype=float)
    return buckets[int(np.argmax(vals))]

def low_bucket(buckets: Sequence[B]) -> B:
    """Lowest average_value; ties keep the earliest bucket."""
    vals = np.array([b.average_value for b in buckets], dtype=float)
    return buckets[int(np.argmin(vals))]

def seasonal_variation(peak: float, low: float) -> Optional[float]:
    # None when the low month is zero (variation is unbounded)
    if low == 0:
        return None
    return (peak - low) / low * 100

def recent_trend_counts(yearly: Sequence[YearlyBucket], last_n: int = RECENT_YEARS) -> Dict[str, int]:
    recent = list(yearly)[-last_n:]
    counts = {TREND_UP: 0, TREND_DOWN: 0, TREND_STABLE: 0}
    for y in recent:
        counts[y.trend] = counts.get(y.trend, 0) + 1
    return counts

def recent_trend_direction(yearly: Sequence[YearlyBucket], last_n: int = RECENT_YEARS) -> str:
    """
    Majority vote over the last `last_n` yearly trend labels.
    Returns 'up', 'down' or 'stable'; any tie falls back to 'stable'.
    """
    c = recent_trend_counts(yearly, last_n)
    up, down, stable = c[TREND_UP], c[TREND_DOWN], c[TREND_STABLE]
    if up > down and up > stable:
        return TREND_UP
    if down > up and down > stable:
        return TREND_DOWN
    return TREND_STABLE


# ----------------------------
# Public entrypoint
# ----------------------------
def seasonality_tables(points: Sequence[TimeSeriesPoint]) -> Tuple[List[MonthlyBucket], List[QuarterlyBucket], List[YearlyBucket]]:
    df = points_to_frame(points)
    return monthly_buckets(df), quarterly_buckets(df), yearly_buckets(df)

def analyze_seasonality(
    points: Sequence[TimeSeriesPoint],
    keyword: str,
    country: str,
    insights: Optional[Sequence[str]] = None,
) -> AnalysisResult:
    """
    Monthly / quarterly / yearly breakdown of a date-sorted, non-empty point sequence.
    Pure: same points in, equal result out.
    """
    if not points:
        raise ValueError("analyze_seasonality() needs at least one point")

    monthly, quarterly, yearly = seasonality_tables(points)
    meta = SeriesMetadata(keyword=keyword, country=country)
    return AnalysisResult(
        keyword=meta.display_keyword,
        total_data_points=len(points),
        date_range=DateRange(start=points[0].date, end=points[-1].date),
        monthly=tuple(monthly),
        quarterly=tuple(quarterly),
        yearly=tuple(yearly),
        insights=tuple(insights or ()),
    )
