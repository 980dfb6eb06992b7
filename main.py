"""Command-line duplicate check for a civic issue report.

Loads environment variables, reads candidate issues from a JSON export or
the configured Supabase project, and prints whether the report looks like a
duplicate of a recent open issue. A duplicate verdict is advisory: the exit
code is 0 either way, and 1 only for configuration or usage problems.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import json
import os
import sys
from contextlib import AsyncExitStack
from datetime import datetime, timezone
from pathlib import Path

# Load environment variables first, before any other imports
load_dotenv()

from civic_dedup.config import reload_config
from civic_dedup.dedup.detector import DuplicateDetector
from civic_dedup.models import Coordinates, ReportDraft
from civic_dedup.performance import get_performance_metrics
from civic_dedup.store import InMemoryIssueStore, IssueStoreError, SupabaseIssueStore
from civic_dedup.store.utils import format_time_ago
from civic_dedup.utils.logger import log_error, log_info, set_log_level
from civic_dedup.vision import AsyncVisionClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check a civic issue report for likely duplicates.")
    parser.add_argument('--description', required=True, help='Report description text.')
    parser.add_argument('--location', default='', help='Free-form location text.')
    parser.add_argument('--lat', type=float, help='Report latitude (requires --lng).')
    parser.add_argument('--lng', type=float, help='Report longitude (requires --lat).')
    parser.add_argument('--category', help='Report category, e.g. Electricity.')
    parser.add_argument('--image', type=Path, help='Path to the report photo.')
    parser.add_argument('--issues-file', type=Path,
                        help='JSON array of existing issues; defaults to the Supabase store.')
    parser.add_argument('--timeout', type=float, help='Deadline in seconds for the whole check.')
    parser.add_argument('--threshold', type=float, help='Composite score a candidate must exceed.')
    parser.add_argument('--json', dest='as_json', action='store_true', help='Print the result as JSON.')
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Push CLI overrides into the environment read by the settings classes."""
    if args.timeout is not None:
        os.environ['DUPLICATE_TIMEOUT_SECONDS'] = str(args.timeout)
    if args.threshold is not None:
        os.environ['DUPLICATE_DUPLICATE_THRESHOLD'] = str(args.threshold)


def build_report(args: argparse.Namespace, parser: argparse.ArgumentParser) -> ReportDraft:
    coordinates = None
    if (args.lat is None) != (args.lng is None):
        parser.error('--lat and --lng must be given together')
    if args.lat is not None:
        coordinates = Coordinates.try_create(args.lat, args.lng)
        if coordinates is None:
            parser.error(f'coordinates out of range: {args.lat},{args.lng}')

    image = None
    if args.image is not None:
        try:
            image = args.image.read_bytes()
        except OSError as e:
            parser.error(f'cannot read image {args.image}: {e}')

    return ReportDraft(
        description=args.description,
        location=args.location,
        coordinates=coordinates,
        image=image,
        category=args.category,
    )


def print_result(result, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    if not result.is_duplicate:
        print("✅ No likely duplicates found. The report can be submitted.")
        return

    print(f"⚠️  Possible duplicate (confidence {round(result.confidence * 100)}%)")
    now = datetime.now(timezone.utc)
    for duplicate in result.duplicates:
        print(f"  - [{duplicate.id}] {duplicate.title or duplicate.description[:60]}")
        print(f"      {duplicate.location} · reported {format_time_ago(duplicate.created_at, now)}"
              f" · score {duplicate.similarity_score:.2f} ({duplicate.match_type.value})")


async def run_check(args: argparse.Namespace, report: ReportDraft, config, detection):
    async with AsyncExitStack() as stack:
        if args.issues_file is not None:
            store = InMemoryIssueStore.from_json_file(args.issues_file)
        else:
            store = await stack.enter_async_context(SupabaseIssueStore(config))

        analyzer = None
        if detection.image_similarity_enabled and report.image:
            analyzer = await stack.enter_async_context(AsyncVisionClient(config))

        detector = DuplicateDetector(store, config=detection, image_analyzer=analyzer)
        return await detector.check(report)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    apply_overrides(args)

    config = reload_config()
    set_log_level(config.log_level)
    detection = config.detection()
    config.log_configuration(detection)

    issues = config.validate_configuration(detection)
    if args.issues_file is None and not config.store_configured():
        issues.append("SUPABASE_URL and SUPABASE_ANON_KEY are required without --issues-file")
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    report = build_report(args, parser)

    try:
        result = asyncio.run(run_check(args, report, config, detection))
    except IssueStoreError as e:
        # Only reachable when the issues file itself is unreadable.
        log_error("Cannot load candidate issues", error=str(e))
        print(f"❌ {e}")
        return 1

    print_result(result, args.as_json)
    get_performance_metrics().log_performance_summary()
    log_info("Duplicate check finished", is_duplicate=result.is_duplicate)
    return 0


if __name__ == "__main__":
    sys.exit(main())
