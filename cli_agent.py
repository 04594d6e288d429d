#!/usr/bin/env python3
"""
Seasonality report for a Google Trends CSV export.

    python cli_agent.py multiTimeline.csv --out-dir outputs --charts
    python cli_agent.py multiTimeline.csv --enhance      # needs OPENAI_API_KEY
"""

import argparse
import json
import os
import sys

from trends_seasonality.config import load_config
from trends_seasonality.errors import TrendsAnalysisError
from trends_seasonality.export import write_export
from trends_seasonality.logging_setup import setup_logging
from trends_seasonality.pipeline import run_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Google Trends seasonality analyzer')
    parser.add_argument('file', help='Google Trends CSV export')
    parser.add_argument('--out-dir', default=None,
                        help='Directory for the JSON export and charts (default: TRENDS_OUTPUT_DIR or ./outputs)')
    parser.add_argument('--enhance', action='store_true',
                        help='Rewrite insights with OpenAI (falls back to template insights on failure)')
    parser.add_argument('--model', default=None, help='OpenAI model for --enhance')
    parser.add_argument('--charts', action='store_true', help='Write monthly/quarterly/yearly PNG charts')
    parser.add_argument('--json', action='store_true', help='Print the full result as JSON instead of a summary')
    parser.add_argument('--no-export', action='store_true', help='Do not write the JSON export file')
    parser.add_argument('--log-level', default=None, help='DEBUG, INFO, WARNING, ...')
    return parser


def print_summary(result) -> None:
    print(f'Analysis results for "{result.keyword}"')
    print(f'{result.total_data_points} data points, {result.date_range.start} to {result.date_range.end}')
    print()
    print('Monthly:')
    for m in result.monthly:
        print(f'  {m.month:<10} avg {m.average_value:>7.2f}  share {m.percentage:>6.2f}%')
    print('Quarterly:')
    for q in result.quarterly:
        print(f'  {q.quarter:<10} avg {q.average_value:>7.2f}  share {q.percentage:>6.2f}%')
    print('Yearly:')
    for y in result.yearly:
        print(f'  {y.year:<10} avg {y.average_value:>7.2f}  trend {y.trend}')
    print()
    print('Insights:')
    for i, text in enumerate(result.insights, start=1):
        print(f'  {i}. {text}')


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(output_dir=args.out_dir, openai_model=args.model, log_level=args.log_level)
    setup_logging(config.log_level)

    llm_call_fn = None
    if args.enhance:
        if config.enhancement_available:
            # imported lazily so the OpenAI SDK is only loaded when asked for
            from trends_seasonality.openai_llm import make_llm_call_fn
            llm_call_fn = make_llm_call_fn(model=config.openai_model, api_key=config.openai_api_key)
        else:
            print('OPENAI_API_KEY not set (or not an sk- key); using template insights.', file=sys.stderr)

    try:
        result = run_file(args.file, config=config, llm_call_fn=llm_call_fn)
    except TrendsAnalysisError as e:
        print(f'Processing error: {e.message}', file=sys.stderr)
        return 1
    except OSError as e:
        print(f'Processing error: {e}', file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_summary(result)

    if not args.no_export:
        path = write_export(result, config.output_dir)
        print(f'\nExported {path}', file=sys.stderr)
    if args.charts:
        from trends_seasonality.viz import plot_all
        stem = os.path.splitext(os.path.basename(args.file))[0]
        for name, path in plot_all(result, config.output_dir, prefix=f'{stem}-').items():
            print(f'Chart ({name}): {path}', file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
