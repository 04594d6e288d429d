from __future__ import annotations
import os
from typing import Dict, Optional, Tuple
import matplotlib.pyplot as plt

from .models import TREND_DOWN, TREND_UP, AnalysisResult

TREND_COLORS = {TREND_UP: "#16a34a", TREND_DOWN: "#dc2626"}
STABLE_COLOR = "#6b7280"
BAR_COLOR = "#2563eb"

def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)

def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def plot_monthly(
    result: AnalysisResult,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Average interest per calendar month (bars) with each month's share of searches
    annotated above the bar.
    """
    labels = [m.month[:3] for m in result.monthly]
    avgs = [m.average_value for m in result.monthly]

    fig, ax = plt.subplots(figsize=(10, 4))
    bars = ax.bar(labels, avgs, color=BAR_COLOR)
    for bar, m in zip(bars, result.monthly):
        ax.annotate(f"{m.percentage:.1f}%", (bar.get_x() + bar.get_width() / 2, bar.get_height()),
                    ha="center", va="bottom", fontsize=8)
    ax.set_title(f'Monthly seasonality: "{result.keyword}"')
    ax.set_ylabel("Average interest")
    return fig, ax, _finish(fig, out_path, show)

def plot_quarterly(
    result: AnalysisResult,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Share of total searches per quarter (pie)."""
    labels = [f"{q.quarter} ({q.percentage:.1f}%)" for q in result.quarterly]
    shares = [q.total_searches for q in result.quarterly]

    fig, ax = plt.subplots(figsize=(5, 5))
    if sum(shares) > 0:
        ax.pie(shares, labels=labels, startangle=90, counterclock=False)
    ax.set_title("Quarterly distribution")
    ax.axis("equal")
    return fig, ax, _finish(fig, out_path, show)

def plot_yearly(
    result: AnalysisResult,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Year-over-year average interest, bars coloured by trend label."""
    years = [str(y.year) for y in result.yearly]
    avgs = [y.average_value for y in result.yearly]
    colors = [TREND_COLORS.get(y.trend, STABLE_COLOR) for y in result.yearly]

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.bar(years, avgs, color=colors)
    ax.set_title(f'Year-over-year interest: "{result.keyword}"')
    ax.set_ylabel("Average interest")
    ax.set_xlabel("Year")
    return fig, ax, _finish(fig, out_path, show)

def plot_all(result: AnalysisResult, out_dir: str, prefix: str = "") -> Dict[str, Optional[str]]:
    """Write monthly/quarterly/yearly PNGs into out_dir; returns {name: path}."""
    paths = {}
    for name, fn in (("monthly", plot_monthly), ("quarterly", plot_quarterly), ("yearly", plot_yearly)):
        _, _, saved = fn(result, out_path=os.path.join(out_dir, f"{prefix}{name}.png"))
        paths[name] = saved
    return paths
