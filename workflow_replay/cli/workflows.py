#!/usr/bin/env python3
"""CLI entry point for creating and listing workflows."""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from workflow_replay.errors import StorageError
from workflow_replay.models.workflow import format_workflow_listing
from workflow_replay.storage.workflow_store import WorkflowStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage recorded workflows")
    parser.add_argument("--store-dir", type=Path, help="Directory holding workflow files")

    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a new draft workflow")
    create.add_argument("--title", required=True, help="The title of the workflow")
    create.add_argument("--website-url", help="The target website URL for the workflow")
    create.add_argument("--description", help="What the workflow does")
    create.add_argument("--success-criteria", help="How to tell the workflow succeeded")

    commands.add_parser("list", help="List all workflows and their steps")

    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    store = WorkflowStore(args.store_dir)

    try:
        if args.command == "create":
            workflow = store.create_workflow(
                title=args.title,
                website_url=args.website_url,
                description=args.description,
                success_criteria=args.success_criteria,
            )
            print(f'Successfully created workflow "{workflow.title}" (ID: {workflow.id})')
        else:
            for line in format_workflow_listing(store.list_workflows()):
                print(line)

    except StorageError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
