import pytest

from conftest import make_points
from trends_seasonality.metrics import (
    analyze_seasonality,
    attach_percentages,
    low_bucket,
    peak_bucket,
    period_totals,
    recent_trend_direction,
    seasonal_variation,
    trend_label,
)
from trends_seasonality.models import YearlyBucket, points_to_frame


def test_trend_thresholds():
    assert trend_label(94, 100) == "down"
    assert trend_label(103, 100) == "stable"
    assert trend_label(106, 100) == "up"
    assert trend_label(105, 100) == "stable"
    assert trend_label(95, 100) == "stable"


def test_trend_from_zero_previous_year():
    assert trend_label(10, 0) == "up"
    assert trend_label(0, 0) == "stable"


@pytest.mark.parametrize("second, expected", [(94.0, "down"), (103.0, "stable")])
def test_yearly_trend_from_points(second, expected):
    pts = make_points([("2021-01-01", 100.0), ("2021-06-01", 100.0),
                       ("2022-01-01", second), ("2022-06-01", second)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    assert [y.year for y in result.yearly] == [2021, 2022]
    assert [y.trend for y in result.yearly] == ["stable", expected]


def test_only_present_periods_get_buckets():
    pts = make_points([("2023-03-05", 10.0), ("2023-07-09", 30.0), ("2023-07-16", 20.0)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    assert [m.month for m in result.monthly] == ["March", "July"]
    assert [q.quarter for q in result.quarterly] == ["Q1", "Q3"]
    march, july = result.monthly
    assert march.total_searches == 10.0
    assert july.average_value == 25.0
    assert july.total_searches == 50.0
    assert march.percentage == pytest.approx(16.67)
    assert july.percentage == pytest.approx(83.33)


def test_percentages_sum_to_hundred(two_year_points):
    result = analyze_seasonality(two_year_points, "kw", "Unknown")
    assert len(result.monthly) == 12
    assert len(result.quarterly) == 4
    assert sum(m.percentage for m in result.monthly) == pytest.approx(100, abs=0.1)
    assert sum(q.percentage for q in result.quarterly) == pytest.approx(100, abs=0.1)


def test_percentages_with_zero_total():
    pts = make_points([("2023-01-01", 0.0), ("2023-02-01", 0.0)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    assert [m.percentage for m in result.monthly] == [0.0, 0.0]


def test_averages_are_rounded_totals_are_not():
    pts = make_points([("2023-01-01", 1.0), ("2023-01-08", 1.0), ("2023-01-15", 2.0)])
    df = points_to_frame(pts)
    tbl = attach_percentages(period_totals(df, "month"))
    row = tbl.iloc[0]
    assert row["average_value"] == 1.33
    assert row["total_searches"] == 4.0
    assert row["percentage"] == 100.0


def test_output_sort_order():
    pts = make_points([("2023-12-01", 1.0), ("2021-05-01", 2.0), ("2022-02-01", 3.0)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    assert [m.month_number for m in result.monthly] == [2, 5, 12]
    assert [q.quarter_number for q in result.quarterly] == [1, 2, 4]
    assert [y.year for y in result.yearly] == [2021, 2022, 2023]


def test_date_range_and_counts(two_year_points):
    result = analyze_seasonality(two_year_points, "coffee", "Brazil")
    assert result.keyword == "coffee in Brazil"
    assert result.total_data_points == 24
    assert result.date_range.start == two_year_points[0].date == "2022-01-01"
    assert result.date_range.end == two_year_points[-1].date == "2023-12-01"
    assert result.date_range.start <= result.date_range.end


def test_unknown_country_keeps_bare_keyword(two_year_points):
    assert analyze_seasonality(two_year_points, "coffee", "Unknown").keyword == "coffee"


def test_analyze_is_idempotent(two_year_points):
    first = analyze_seasonality(two_year_points, "kw", "US")
    second = analyze_seasonality(two_year_points, "kw", "US")
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_analyze_requires_points():
    with pytest.raises(ValueError):
        analyze_seasonality([], "kw", "US")


def test_peak_low_and_variation():
    pts = make_points([("2023-01-01", 80.0), ("2023-02-01", 20.0), ("2023-03-01", 50.0)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    peak, low = peak_bucket(result.monthly), low_bucket(result.monthly)
    assert peak.month == "January"
    assert low.month == "February"
    assert seasonal_variation(peak.average_value, low.average_value) == pytest.approx(300.0)


def test_peak_and_low_ties_keep_first_bucket():
    pts = make_points([("2023-02-01", 50.0), ("2023-05-01", 50.0), ("2023-09-01", 10.0), ("2023-11-01", 10.0)])
    result = analyze_seasonality(pts, "kw", "Unknown")
    assert peak_bucket(result.monthly).month == "February"
    assert low_bucket(result.monthly).month == "September"


def test_variation_undefined_for_zero_low():
    assert seasonal_variation(10.0, 0.0) is None


def _years(*trends):
    return [YearlyBucket(year=2000 + i, average_value=1.0, total_searches=1.0, trend=t)
            for i, t in enumerate(trends)]


@pytest.mark.parametrize("trends, expected", [
    (("stable", "up", "up"), "up"),
    (("stable", "down", "down"), "down"),
    (("stable", "up", "down"), "stable"),
    (("stable", "up"), "stable"),
    (("up", "down", "up", "down", "down"), "down"),
    (("stable",), "stable"),
])
def test_recent_trend_direction(trends, expected):
    assert recent_trend_direction(_years(*trends)) == expected
