#!/usr/bin/env python3
"""CLI for reviewing Bitbucket pull requests.

This is a thin wrapper around src.pr_reviewer.entrypoint.

Usage:
    bitbucket-pr-review acme api 123 --instruction-file REVIEW_GUIDELINES.md --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.clients.bitbucket import BitbucketClient
from src.pr_reviewer.entrypoint import review_pull_request
from src.pr_reviewer.models import CodeReviewInstruction, PullRequestInfo, ReviewOptions
from src.pr_reviewer.utils.file_saver import (
    format_comments_for_display,
    format_publish_results_for_display,
    save_review_to_file,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Review a Bitbucket pull request and post inline comments"
    )
    parser.add_argument("workspace", help="Bitbucket workspace slug")
    parser.add_argument("repository", help="Bitbucket repository slug")
    parser.add_argument("pr_number", type=int, help="Pull request number")

    instruction_group = parser.add_mutually_exclusive_group(required=True)
    instruction_group.add_argument("--instruction", help="Project review guidelines as text")
    instruction_group.add_argument(
        "--instruction-file", type=Path, help="File containing the project review guidelines"
    )

    parser.add_argument(
        "--language", default="en", help="Language the comments are written in (default: en)"
    )
    parser.add_argument(
        "--ignore-file",
        action="append",
        default=[],
        dest="ignored_files",
        help="Path to leave out of the review; may be repeated",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the comments instead of posting them",
    )
    parser.add_argument(
        "--bitbucket-token",
        help="Bitbucket access token (or set BITBUCKET_ACCESS_TOKEN env var)",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        help="Save the review run as JSON in this directory",
    )
    return parser


async def run(args: argparse.Namespace) -> None:
    if args.instruction_file is not None:
        instruction_text = args.instruction_file.read_text()
    else:
        instruction_text = args.instruction

    pr_info = PullRequestInfo(
        workspace=args.workspace,
        repository=args.repository,
        pr_number=args.pr_number,
        ignored_files=tuple(args.ignored_files) or None,
    )
    instruction = CodeReviewInstruction(
        comment_language=args.language, instruction=instruction_text
    )

    async with BitbucketClient(access_token=args.bitbucket_token) as bitbucket_client:
        result = await review_pull_request(
            pr_info,
            instruction,
            ReviewOptions(dry_run=args.dry_run),
            bitbucket_client=bitbucket_client,
        )

    if not result.dry_run:
        print(format_comments_for_display(result.comments))
        print(format_publish_results_for_display(result.publish_results))

    if args.output_dir:
        filepath = save_review_to_file(result, pr_info, args.output_dir)
        print(f"\n💾 Review saved to: {filepath}\n")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the PR reviewer CLI."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Error reviewing PR: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
