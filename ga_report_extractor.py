#!/usr/bin/env python3
"""
Fetch every configured Google Analytics report for one or more views and print a summary.
"""

import argparse
import logging
import sys

import pandas as pd
from tqdm import tqdm

from report_config import get_config_path, load_report_configuration
from report_fetcher import ON_ERROR_POLICIES, ReportingApi


def read_view_ids(view_id_arg):
    """A single view ID, or a file with one view ID per line."""
    try:
        with open(view_id_arg, 'r') as f:
            return [line.strip() for line in f if line.strip()]
    except OSError:
        return [view_id_arg]


def summarize(results):
    """One row per report outcome, plus a row per skipped report."""
    rows = []
    for view_id, result in results.items():
        for outcome in result.outcomes:
            rows.append({
                'view_id': view_id,
                'report': outcome.name,
                'pages': len(outcome.pages),
                'rows': outcome.row_count,
                'seconds': round(outcome.elapsed_seconds, 2),
                'error': str(outcome.error) if outcome.error else '',
            })
        for name in result.skipped:
            rows.append({'view_id': view_id, 'report': name, 'pages': 0, 'rows': 0, 'seconds': 0.0, 'error': 'skipped'})
    return pd.DataFrame(rows, columns=['view_id', 'report', 'pages', 'rows', 'seconds', 'error'])


def build_parser():
    parser = argparse.ArgumentParser(description="Fetch configured Google Analytics reports (Reporting API v4) for one or more views.")
    parser.add_argument("view_id", help="View ID, or path to a file with one view ID per line")
    parser.add_argument("-c", "--config", help="Report configuration JSON file (default: $GA_REPORT_CONFIG or report_config.json)", default=None)
    parser.add_argument("-k", "--keyfile", help="Service account key file (overrides KEY_FILE_PATH and the configuration)", default=None)
    parser.add_argument("--on-error", choices=ON_ERROR_POLICIES, default='stop',
                        help="'stop' abandons the remaining reports after a failure, 'continue' carries on")
    parser.add_argument("--max-pages", type=int, default=None, help="Maximum requests per report (default: follow every page)")
    parser.add_argument("--debug", action="store_true", help="Enable debug output to show verbose messages.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    config = load_report_configuration(args.config or get_config_path())
    api = ReportingApi(config=config, key_file_path=args.keyfile, on_error=args.on_error, max_pages=args.max_pages)

    view_ids = read_view_ids(args.view_id)
    results = {}
    for view_id in tqdm(view_ids, desc="Processing views"):
        results[view_id] = api.fetch_all(view_id)

    summary_df = summarize(results)
    if summary_df.empty:
        print("No reports configured.")
    else:
        print(summary_df.to_string(index=False))

    total_pages = sum(len(result.reports) for result in results.values())
    print(f"Fetched {total_pages} report page(s) across {len(view_ids)} view(s)")
    if any(not result.complete for result in results.values()):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

## Example usage:

# Single view, configuration from report_config.json next to this script
# python ga_report_extractor.py 123456789

# Views listed in a file, keep going when a report fails
# python ga_report_extractor.py views.txt -c my_reports.json --on-error continue

# Cap every report at 5 pages
# python ga_report_extractor.py 123456789 --max-pages 5 --debug
