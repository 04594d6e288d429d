# trends_seasonality/export.py
from __future__ import annotations
import json, os, re
from typing import Any, Dict

from .models import AnalysisResult


def export_document(result: AnalysisResult) -> Dict[str, Any]:
    """The download shape: keyword, dateRange, insights and the three bucket lists."""
    d = result.to_dict()
    return {
        "keyword": d["keyword"],
        "dateRange": d["dateRange"],
        "insights": d["insights"],
        "monthlyData": d["seasonality"]["monthly"],
        "quarterlyData": d["seasonality"]["quarterly"],
        "yearlyData": d["seasonality"]["yearly"],
    }

def export_filename(result: AnalysisResult) -> str:
    safe = re.sub(r'[\\/:*?"<>|]+', "_", result.keyword).strip() or "trends"
    return f"{safe}-seasonality-analysis.json"

def to_json(result: AnalysisResult) -> str:
    return json.dumps(export_document(result), indent=2, ensure_ascii=False)

def write_export(result: AnalysisResult, out_dir: str) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, export_filename(result))
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(to_json(result))
    return path
