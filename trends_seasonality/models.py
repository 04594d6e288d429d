# trends_seasonality/models.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
QUARTER_NAMES = ["Q1", "Q2", "Q3", "Q4"]

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

UNKNOWN_COUNTRY = "Unknown"


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One observation of search interest. `month`/`quarter`/`year` come from `date`."""
    date: str
    value: float
    month: int
    quarter: int
    year: int

    @classmethod
    def from_date(cls, day: date, value: float) -> "TimeSeriesPoint":
        return cls(
            date=day.strftime("%Y-%m-%d"),
            value=float(value),
            month=day.month,
            quarter=(day.month - 1) // 3 + 1,
            year=day.year,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": self.value, "month": self.month,
                "quarter": self.quarter, "year": self.year}


@dataclass(frozen=True)
class SeriesMetadata:
    keyword: str
    country: str = UNKNOWN_COUNTRY

    @property
    def display_keyword(self) -> str:
        # "coffee in United States"; bare keyword when the region is unknown
        if self.country and self.country != UNKNOWN_COUNTRY:
            return f"{self.keyword} in {self.country}"
        return self.keyword


@dataclass(frozen=True)
class MonthlyBucket:
    month: str
    month_number: int
    average_value: float
    total_searches: float
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "monthNumber": self.month_number,
            "averageValue": self.average_value,
            "totalSearches": self.total_searches,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class QuarterlyBucket:
    quarter: str
    quarter_number: int
    average_value: float
    total_searches: float
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quarter": self.quarter,
            "quarterNumber": self.quarter_number,
            "averageValue": self.average_value,
            "totalSearches": self.total_searches,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class YearlyBucket:
    year: int
    average_value: float
    total_searches: float
    trend: str = TREND_STABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "averageValue": self.average_value,
            "totalSearches": self.total_searches,
            "trend": self.trend,
        }


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Everything the rendering layer gets for one upload.
    A new upload (or enhanced insights) means a new object; nothing here is mutated.
    """
    keyword: str
    total_data_points: int
    date_range: DateRange
    monthly: Tuple[MonthlyBucket, ...]
    quarterly: Tuple[QuarterlyBucket, ...]
    yearly: Tuple[YearlyBucket, ...]
    insights: Tuple[str, ...] = field(default_factory=tuple)

    def with_insights(self, insights: Sequence[str]) -> "AnalysisResult":
        return replace(self, insights=tuple(insights))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "totalDataPoints": self.total_data_points,
            "dateRange": self.date_range.to_dict(),
            "seasonality": {
                "monthly": [m.to_dict() for m in self.monthly],
                "quarterly": [q.to_dict() for q in self.quarterly],
                "yearly": [y.to_dict() for y in self.yearly],
            },
            "insights": list(self.insights),
        }


def points_to_frame(points: Sequence[TimeSeriesPoint]) -> pd.DataFrame:
    """Point sequence -> DataFrame[date, value, month, quarter, year] (input order kept)."""
    cols = ["date", "value", "month", "quarter", "year"]
    if not points:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([p.to_dict() for p in points], columns=cols)


def sort_points(points: List[TimeSeriesPoint]) -> List[TimeSeriesPoint]:
    # YYYY-MM-DD sorts lexicographically in date order; stable for equal dates
    return sorted(points, key=lambda p: p.date)
