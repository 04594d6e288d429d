# trends_seasonality/pipeline.py
from __future__ import annotations
import logging
from typing import Callable, List, Optional, Union

from .config import Config
from .data_prep import load_trends_file, parse_trends_csv, validate_upload
from .insights import enhance_insights, generate_insights
from .metrics import analyze_seasonality
from .models import AnalysisResult, SeriesMetadata, TimeSeriesPoint

logger = logging.getLogger(__name__)

LLMCallFn = Callable[[str], str]


def analyze_points(
    points: List[TimeSeriesPoint],
    meta: SeriesMetadata,
    llm_call_fn: Optional[LLMCallFn] = None,
) -> AnalysisResult:
    """seasonality -> template insights -> optional enhancement, for already parsed points."""
    logger.info("Parsed %d points for %r (%s .. %s)", len(points), meta.keyword,
                points[0].date, points[-1].date)
    result = analyze_seasonality(points, meta.keyword, meta.country)
    result = result.with_insights(generate_insights(result))
    return enhance_insights(result, llm_call_fn)

def run_analysis(
    data: Union[bytes, str],
    filename: str,
    *,
    content_type: Optional[str] = None,
    config: Optional[Config] = None,
    llm_call_fn: Optional[LLMCallFn] = None,
) -> AnalysisResult:
    """
    One upload, start to finish:
      size/type check -> parse -> seasonality -> template insights -> optional enhancement.
    Raises TrendsAnalysisError subclasses for fatal problems; enhancement never fails the run.
    """
    config = config or Config()
    size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
    validate_upload(filename, size, content_type=content_type, max_bytes=config.max_upload_bytes)

    points, meta = parse_trends_csv(data, filename=filename)
    return analyze_points(points, meta, llm_call_fn)

def run_file(
    path: str,
    *,
    config: Optional[Config] = None,
    llm_call_fn: Optional[LLMCallFn] = None,
) -> AnalysisResult:
    config = config or Config()
    # size/type are checked before reading the whole file
    points, meta = load_trends_file(path, max_bytes=config.max_upload_bytes)
    return analyze_points(points, meta, llm_call_fn)
