#!/usr/bin/env python3
"""
Command-line interface
======================
Scan a site and write the trust report, or serve the HTTP API.

All scan configuration flows through ``ScanConfig``, the single source of
truth for defaults and limits.

Run with:
    python -m trustscan scan https://example.com --max-pages 20 --format all
    python -m trustscan serve --port 3000

Exit codes: 0 success, 1 invalid input or fatal scan error.
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env (API keys, credentials) before anything reads the environment
_env_path = Path(__file__).resolve().parent.parent / '.env'
if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()  # tries CWD

from .auth.variants import BasicAuth
from .errors import InvalidURLError, SessionError
from .models import FinalReport
from .run_config import ScanConfig, Settings, default
from .utils import report_base_name

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

FORMATS = ("md", "docx", "json", "all")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _str2bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _auth_from_args(args) -> Optional[BasicAuth]:
    if not args.login_url:
        return None
    auth = BasicAuth.from_env(args.login_url, args.username or "", args.password or "")
    if not auth.is_complete:
        logger.warning(
            "[AUTH] --login-url given but username/password missing "
            "(set TRUSTSCAN_USERNAME / TRUSTSCAN_PASSWORD) — scanning unauthenticated"
        )
        return None
    return auth


def export_report(report: FinalReport, output_dir: str, fmt: str, base_name: str) -> List[str]:
    """Write the report in the requested format(s). Returns written paths."""
    from .markdown_exporter import export_markdown
    from .report import export_json
    from .word_exporter import export_docx

    out = Path(output_dir)
    wanted = {"md", "docx", "json"} if fmt == "all" else {fmt}
    exported = []
    if "md" in wanted:
        exported.append(export_markdown(report, str(out / f"{base_name}.md")))
    if "json" in wanted:
        exported.append(export_json(report, str(out / f"{base_name}.json")))
    if "docx" in wanted:
        exported.append(export_docx(report, str(out / f"{base_name}.docx")))
    return exported


def print_summary(report: FinalReport, elapsed: float, from_cache: bool = False):
    """Print scan summary."""
    print("\n" + "=" * 65)
    print("SCAN COMPLETE" + (" (cached report)" if from_cache else ""))
    print("=" * 65)
    print(f"  Site:                {report.start_url}")
    print(f"  Hygiene score:       {report.score.total}/100")
    print(f"  Trust level:         {report.trust_summary.value}")
    print(f"  Pages scanned:       {report.pages_scanned}")
    print(f"  Issues:              {len(report.issues)}")
    print(f"  Critical issues:     {len(report.critical_issues)}")
    print("-" * 65)
    for bucket, value in report.score.breakdown.items():
        print(f"  {bucket.value:<20} {value}")
    print("-" * 65)
    print(f"  Total time:          {elapsed:.1f}s")
    print(f"  {report.closing_insight}")
    print("=" * 65)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_scan(args) -> int:
    from .coordinator import ScanCoordinator

    try:
        config = ScanConfig.from_cli_args(args, auth=_auth_from_args(args))
    except InvalidURLError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: invalid option: {exc}", file=sys.stderr)
        return 1

    coordinator = ScanCoordinator(config, Settings.from_env(), use_cache=not args.no_cache)

    def progress_cb(pages_done, current_url, stats):
        print(f"[Page {pages_done}/{config.max_pages}] {current_url[:70]}...")

    coordinator.set_progress_callback(progress_cb)

    start_time = time.time()
    try:
        report = asyncio.run(coordinator.run())
    except SessionError as exc:
        logger.error(f"Scan aborted: {exc}")
        return 1
    except KeyboardInterrupt:
        print("\nScan cancelled.")
        return 1

    try:
        exported = export_report(report, args.output, args.format, report_base_name(config.start_url))
    except OSError as exc:
        logger.error(f"Export failed: {exc}", exc_info=True)
        return 1

    print_summary(report, time.time() - start_time, from_cache=coordinator.from_cache)
    print("\n" + "-" * 40)
    for path in exported:
        print(f"  Exported: {path}")
    print("-" * 40)
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    port = args.port or Settings.from_env().port
    uvicorn.run("trustscan.server:app", host=args.host, port=port, log_level="info")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='trustscan',
        description='Website trust & hygiene scanner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m trustscan scan https://example.com
  python -m trustscan scan example.com --max-pages 25 --max-depth 3 --format all
  python -m trustscan scan https://app.example.com --login-url https://app.example.com/login
  python -m trustscan serve --port 3000
        """
    )
    sub = parser.add_subparsers(dest='command', required=True)

    scan = sub.add_parser('scan', help='Scan a website and write a report')
    scan.add_argument('url', help='Start URL (https:// is assumed when missing)')
    scan.add_argument('--max-pages', type=_positive_int, default=default('max_pages'),
                      help=f"Maximum pages to scan (default: {default('max_pages')})")
    scan.add_argument('--max-depth', type=_non_negative_int, default=default('max_depth'),
                      help=f"Maximum link depth (default: {default('max_depth')})")
    scan.add_argument('--headless', type=_str2bool, default=default('headless'), metavar='true|false',
                      help='Run the browser headless (default: true)')
    scan.add_argument('--output', default=default('output_dir'), metavar='DIR',
                      help=f"Output directory (default: {default('output_dir')})")
    scan.add_argument('--format', choices=FORMATS, default='md',
                      help='Report format (default: md)')
    scan.add_argument('--no-cache', action='store_true',
                      help='Ignore cached reports and do not save this one')

    auth_group = scan.add_argument_group('Authentication',
        'Form login before crawling. Credentials may also come from '
        'TRUSTSCAN_USERNAME / TRUSTSCAN_PASSWORD.')
    auth_group.add_argument('--login-url', type=str, metavar='URL', help='Login page URL')
    auth_group.add_argument('--username', type=str, help='Login username')
    auth_group.add_argument('--password', type=str, help='Login password')
    scan.set_defaults(func=cmd_scan)

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default='0.0.0.0')
    serve.add_argument('--port', type=int, default=None,
                       help=f"Port (default: $PORT or {default('port')})")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
