#!/usr/bin/env python3
"""CLI entry point for recording a workflow step."""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from workflow_replay.errors import ReplayError
from workflow_replay.executor.actions import ACTION_CONTRACTS
from workflow_replay.executor.browser_session import BrowserSession
from workflow_replay.recorder.selector_generator import SelectorStrategyGenerator
from workflow_replay.recorder.step_recorder import StepRecorder
from workflow_replay.storage.workflow_store import WorkflowStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Record (or re-record) one workflow step against a live page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Record a click on the login button as the next step
  python -m workflow_replay.cli.record --workflow-id 3 --url https://example.com/login \\
      --action click --selector "button[type=submit]" --description "Submit login"

  # Replace step 2 with a templated type action
  python -m workflow_replay.cli.record --workflow-id 3 --url https://example.com/login \\
      --action type --selector "#email" --value "{{ email }}" --order 2

  # Actions without a target element need no selector
  python -m workflow_replay.cli.record --workflow-id 3 --action wait --value 1500
        """
    )

    parser.add_argument("--workflow-id", required=True, type=int, help="Workflow to add the step to")
    parser.add_argument(
        "--action",
        required=True,
        choices=[a.value for a in ACTION_CONTRACTS],
        help="Action type for this step"
    )
    parser.add_argument("--url", type=str, help="Page to open before locating the element")
    parser.add_argument("--selector", type=str, help="CSS selector of the target element on --url")
    parser.add_argument("--value", type=str, help="Text to type, URL, wait duration, ...")
    parser.add_argument("--description", type=str, help="What this step does")
    parser.add_argument("--order", type=int, help="Step order; appended as last step if omitted")
    parser.add_argument("--headless", action="store_true", help="Run browser in headless mode")
    parser.add_argument("--store-dir", type=Path, help="Directory holding workflow files")

    return parser


def main(argv: Optional[List[str]] = None):
    """Record a step and print what was stored."""
    args = build_parser().parse_args(argv)

    if args.selector and not args.url:
        print("❌ --selector needs --url to locate the element on")
        sys.exit(1)

    store = WorkflowStore(args.store_dir)

    try:
        with BrowserSession(headless=args.headless or None) as session:
            driver = session.launch(args.url)
            recorder = StepRecorder(store, SelectorStrategyGenerator(driver))

            element = None
            if args.selector:
                element = driver.query_selector(args.selector)
                if element is None:
                    print(f"❌ No element matches {args.selector} on {args.url}")
                    sys.exit(1)

            recorded = recorder.record_step(
                workflow_id=args.workflow_id,
                action=args.action,
                element=element,
                action_value=args.value,
                description=args.description,
                order=args.order,
            )

    except ReplayError as e:
        print(f"❌ {e}")
        sys.exit(1)

    for line in recorded.lines:
        print(line)


if __name__ == "__main__":
    main()
