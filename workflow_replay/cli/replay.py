#!/usr/bin/env python3
"""CLI entry point for replaying workflows."""
import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from workflow_replay.errors import StorageError
from workflow_replay.executor.browser_session import BrowserSession
from workflow_replay.executor.workflow_executor import WorkflowExecutor
from workflow_replay.storage.file_store import FileStore
from workflow_replay.storage.workflow_store import WorkflowStore
from workflow_replay.utils.config import config


def load_variables(raw_json: Optional[str], vars_file: Optional[Path]) -> Dict[str, str]:
    """Merge --vars-file and --vars (the latter wins) into one string mapping."""
    variables: Dict[str, str] = {}

    if vars_file:
        with open(vars_file) as f:
            variables.update(json.load(f))

    if raw_json:
        variables.update(json.loads(raw_json))

    return {str(k): str(v) for k, v in variables.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay a recorded workflow in a fresh browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay every step of workflow 3
  python -m workflow_replay.cli.replay --workflow-id 3

  # Replay only step 2, filling {{ username }} and {{ password }}
  python -m workflow_replay.cli.replay --workflow-id 3 --order 2 \\
      --vars '{"username": "alice", "password": "s3cret"}'

  # Headless, giving up on the whole run after two minutes
  python -m workflow_replay.cli.replay --workflow-id 3 --headless --run-timeout 120
        """
    )

    parser.add_argument("--workflow-id", required=True, type=int, help="Workflow to replay")
    parser.add_argument("--order", type=int, help="Only replay the step with this order")
    parser.add_argument("--vars", type=str, help="Variable values as JSON object")
    parser.add_argument("--vars-file", type=Path, help="Path to JSON file with variable values")
    parser.add_argument("--url", type=str, help="Open this URL before the first step")
    parser.add_argument("--headless", action="store_true", help="Run browser in headless mode")
    parser.add_argument("--step-timeout", type=float, help="Seconds any page operation may take")
    parser.add_argument("--run-timeout", type=float, help="Seconds before remaining steps are skipped")
    parser.add_argument("--store-dir", type=Path, help="Directory holding workflow files")

    return parser


def print_report(lines: List[str]):
    print("\n" + "=" * 60)
    for line in lines:
        print(line)
    print("=" * 60)


def main(argv: Optional[List[str]] = None):
    """Replay a workflow and exit non-zero if any step failed."""
    args = build_parser().parse_args(argv)

    try:
        variables = load_variables(args.vars, args.vars_file)
    except (OSError, ValueError) as e:
        print(f"❌ Invalid variables: {e}")
        sys.exit(1)

    store = WorkflowStore(args.store_dir)

    try:
        with BrowserSession(
            headless=args.headless or config.browser_headless,
            step_timeout=args.step_timeout
        ) as session:
            driver = session.launch(args.url or config.browser_default_url)
            executor = WorkflowExecutor(
                store=store,
                driver=driver,
                file_store=FileStore(),
                http_client=httpx.Client(follow_redirects=True, timeout=session.step_timeout),
                run_timeout=args.run_timeout,
            )
            try:
                report = executor.run(args.workflow_id, order=args.order, variables=variables)
            finally:
                executor.close()

    except StorageError as e:
        print(f"❌ Could not load workflow steps: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)

    print_report(report.lines)
    summary = report.summary
    print(f"Total: {summary.total} | Succeeded: {summary.succeeded} | "
          f"Failed: {summary.failed} | Skipped: {summary.skipped}")

    if report.dummy_variables:
        print(f"Dummy values used for: {', '.join(report.dummy_variables)}")

    sys.exit(0 if report.success else 1)


if __name__ == "__main__":
    main()
