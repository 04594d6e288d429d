import logging
from typing import Iterable, List, Optional

import matplotlib
import pytest

matplotlib.use("Agg")

from trends_seasonality.models import TimeSeriesPoint  # noqa: E402


def build_csv(rows: Iterable[Iterable[str]]) -> bytes:
    """Rows -> CSV bytes; cells containing commas/quotes are quoted the way Trends does."""
    lines = []
    for row in rows:
        cells = []
        for c in row:
            if "," in c or '"' in c:
                c = '"' + c.replace('"', '""') + '"'
            cells.append(c)
        lines.append(",".join(cells))
    return ("\n".join(lines) + "\n").encode("utf-8")


def monthly_rows(start_year: int, values: List[float], date_fmt: str = "{y}-{m:02d}") -> List[List[str]]:
    out = []
    for i, v in enumerate(values):
        y, m = start_year + i // 12, i % 12 + 1
        out.append([date_fmt.format(y=y, m=m), f"{v:g}"])
    return out


def make_points(values_by_date) -> List[TimeSeriesPoint]:
    from datetime import date
    pts = [TimeSeriesPoint.from_date(date.fromisoformat(d), v) for d, v in values_by_date]
    return sorted(pts, key=lambda p: p.date)


def cycling_values(n: int, lo: int = 10, hi: int = 90, step: int = 10) -> List[float]:
    cycle = list(range(lo, hi + 1, step))
    return [float(cycle[i % len(cycle)]) for i in range(n)]


@pytest.fixture
def coffee_csv() -> bytes:
    """Metadata block + 'Week,coffee: (United States)' header + 24 monthly rows, values cycling 10..90."""
    rows = [
        ["Category: All categories"],
        ["coffee: (United States)"],
        ["Week", "coffee: (United States)"],
    ]
    rows += monthly_rows(2022, cycling_values(24))
    return build_csv(rows)


@pytest.fixture
def two_year_points() -> List[TimeSeriesPoint]:
    # Jan is the peak (80), Feb the low (20); 2023 averages below 2022
    data = []
    for y, scale in ((2022, 1.0), (2023, 0.9)):
        for m in range(1, 13):
            v = {1: 80.0, 2: 20.0}.get(m, 50.0) * scale
            data.append((f"{y}-{m:02d}-01", v))
    return make_points(data)


@pytest.fixture
def fake_llm():
    """Records prompts and returns a canned numbered reply."""
    class FakeLLM:
        def __init__(self, reply: Optional[str] = None, error: Optional[Exception] = None):
            self.reply = reply if reply is not None else (
                "1. Launch campaigns in late December to capture the January peak.\n"
                "2. Cut paid search budgets during February when interest bottoms out.\n"
                "3. Front-load Q1 inventory since it carries the largest share of searches.\n"
            )
            self.error = error
            self.prompts: List[str] = []

        def __call__(self, prompt: str) -> str:
            self.prompts.append(prompt)
            if self.error:
                raise self.error
            return self.reply

    return FakeLLM


@pytest.fixture(autouse=True)
def reset_package_logger():
    # the CLI attaches a handler bound to the (captured) stderr of its test
    yield
    pkg = logging.getLogger("trends_seasonality")
    pkg.handlers.clear()
    pkg.setLevel(logging.NOTSET)
