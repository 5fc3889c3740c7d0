"""
Recompute ESG rollups once from CLI and print the report payload.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from app.config import configure_logging
from app.repositories.submission_store import InMemorySubmissionStore
from app.services.esg_pipeline import get_esg_pipeline
from app.services.query_service import QueryOptions


def main() -> int:
    parser = argparse.ArgumentParser(description="Recompute ESG metrics and rollups.")
    parser.add_argument(
        "--input",
        dest="input_path",
        default=None,
        help="Optional JSON file holding a list of submissions; defaults to the configured store.",
    )
    parser.add_argument(
        "--remove-duplicates",
        action="store_true",
        help="Collapse duplicate submissions in the store before recomputing.",
    )
    parser.add_argument("--status", default="All", help="Status filter for the metric listing.")
    parser.add_argument("--search", default="", help="Free-text filter for the metric listing.")
    parser.add_argument("--year", default="all", help="Year filter for the metric listing.")
    parser.add_argument("--sort-field", default="timestamp")
    parser.add_argument("--sort-order", default="asc", choices=("asc", "desc"))
    args = parser.parse_args()

    configure_logging()

    store = None
    if args.input_path:
        entries = json.loads(Path(args.input_path).read_text(encoding="utf-8"))
        store = InMemorySubmissionStore(entries)
    pipeline = get_esg_pipeline(store)

    if args.remove_duplicates:
        pipeline.remove_duplicates()

    result = pipeline.run()
    options = QueryOptions(
        status=args.status,
        search_term=args.search,
        year=args.year,
        sort_field=args.sort_field,
        sort_order=args.sort_order,
    )
    payload = result.to_report_payload()
    payload["metrics"] = [
        metric.to_dict() for metric in pipeline.query(options, result=result)
    ]
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
