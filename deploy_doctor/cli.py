"""Deploy Doctor - command-line driver.

Usage:
    deploy-doctor analyze --log-file build.log                       # one-shot report
    deploy-doctor watch --log-file build.log                         # poll until verdict
    deploy-doctor watch --log-file build.log --project-path ./app --auto-fix

``watch`` re-reads the log file on every poll, so any exporter (a browser
driver, ``tee``, a CI step) can keep appending to it. The report is printed
to stdout and the result is saved to <output-dir>/results.json.

Exit codes: 0 success / clean log, 1 failed / errors found, 2 timeout.
"""

import argparse
import asyncio
import logging
import os
import sys

from deploy_doctor.agents.deploy_monitor import DeployMonitor, file_log_source, read_log_file
from deploy_doctor.core.config import (
    DEPLOY_TIMEOUT_SECONDS,
    LATEST_LOG_COUNT,
    LOG_POLL_INTERVAL_SECONDS,
    OUTPUT_DIR,
)
from deploy_doctor.core.constants import STATUS_FAILED, STATUS_SUCCESS
from deploy_doctor.core.output_formatter import format_analysis, format_monitor_result
from deploy_doctor.parser.known_issues import build_default_registry
from deploy_doctor.parser.log_classifier import LogClassifier, extract_latest_log_lines
from deploy_doctor.services.results_writer import ResultsWriter
from deploy_doctor.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

RESULTS_FILE = "results.json"

EXIT_CODES = {STATUS_SUCCESS: 0, STATUS_FAILED: 1}
EXIT_TIMEOUT = 2


def cmd_analyze(args):
    registry = build_default_registry()
    text = read_log_file(args.log_file)
    analysis = LogClassifier(registry).analyze(text)

    latest = extract_latest_log_lines(text, args.latest)
    if latest:
        print("Latest log lines:")
        for line in latest:
            print(f"  {line}")

    report = format_analysis(analysis)
    if report:
        print("\n".join(report))
    elif analysis.success_detected:
        print("Deployment looks successful.")
    else:
        print("No error-like lines detected.")

    return 1 if analysis.has_errors else 0


def cmd_watch(args):
    monitor = DeployMonitor(
        build_default_registry(),
        timeout_seconds=args.timeout,
        poll_interval_seconds=args.poll_interval,
        output_dir=args.output_dir,
    )
    logger.info("Watching %s (timeout %.0fs, auto-fix %s)", args.log_file, args.timeout, args.auto_fix)
    result = asyncio.run(monitor.watch(
        file_log_source(args.log_file),
        project_path=args.project_path,
        auto_fix=args.auto_fix,
    ))

    print("\n".join(format_monitor_result(result)))

    results_path = os.path.join(args.output_dir, RESULTS_FILE)
    if ResultsWriter.write_results(result, results_path):
        print(f"Results saved at: {results_path}")

    return EXIT_CODES.get(result.status, EXIT_TIMEOUT)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="deploy-doctor",
        description="Classify deployment logs and apply known Dockerfile fixes",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a saved deployment log once")
    analyze_parser.add_argument("--log-file", required=True, help="Deployment log text file")
    analyze_parser.add_argument("--latest", type=int, default=LATEST_LOG_COUNT,
                                help=f"Timestamped tail lines to show (default: {LATEST_LOG_COUNT})")

    watch_parser = subparsers.add_parser("watch", help="Poll a deployment log until it fails or succeeds")
    watch_parser.add_argument("--log-file", required=True, help="Deployment log text file, re-read each poll")
    watch_parser.add_argument("--project-path", help="Project directory holding the Dockerfile")
    watch_parser.add_argument("--auto-fix", action="store_true",
                              help="Apply known local fixes when the deployment fails")
    watch_parser.add_argument("--timeout", type=float, default=DEPLOY_TIMEOUT_SECONDS,
                              help=f"Seconds before giving up (default: {DEPLOY_TIMEOUT_SECONDS:.0f})")
    watch_parser.add_argument("--poll-interval", type=float, default=LOG_POLL_INTERVAL_SECONDS,
                              help=f"Seconds between polls (default: {LOG_POLL_INTERVAL_SECONDS:.0f})")
    watch_parser.add_argument("--output-dir", default=OUTPUT_DIR,
                              help=f"Log snapshots and results.json (default: {OUTPUT_DIR})")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "watch" and args.auto_fix and not args.project_path:
        parser.error("--auto-fix requires --project-path")
    if args.command == "analyze" and args.latest < 0:
        parser.error("--latest must be >= 0")

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_to_file=False)

    if args.command == "analyze":
        return cmd_analyze(args)
    return cmd_watch(args)


if __name__ == "__main__":
    sys.exit(main())
