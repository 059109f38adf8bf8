"""Bitbucket pull request reviewer.

This module provides the PRReviewer class that drives a single review run:
1. Fetching: the diff and the existing comments, concurrently
2. Reviewing: the reviewing agent proposes comments
3. Dry-run reporting or publishing of the proposed comments

Any failure stops the run at the step where it happened and is re-raised to the
caller as is. A run is never resumed; retrying means starting a new run.
"""

import asyncio
from typing import cast

from src.pr_reviewer.agents.code_reviewer import ReviewerAgent
from src.pr_reviewer.change_set import ChangeSetService
from src.pr_reviewer.models import (
    CodeReviewInstruction,
    DiffFile,
    ExistingComment,
    ProposedComments,
    PublishableComment,
    PullRequestInfo,
    ReviewOptions,
    ReviewRunResult,
    ReviewState,
)
from src.pr_reviewer.utils.file_saver import format_comments_for_display
from src.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


def to_publishable_comments(proposed: ProposedComments | None) -> list[PublishableComment]:
    """Rename agent output fields into Bitbucket's comment creation body.

    An absent result means there is nothing to publish.
    """
    if proposed is None:
        return []

    return [
        {
            "content": {"raw": comment.comment},
            "inline": {"to": comment.comment_line, "path": comment.filepath},
        }
        for comment in proposed.comments
    ]


class PRReviewer:
    """Reviews Bitbucket pull requests with a reviewing agent."""

    def __init__(self, reviewer_agent: ReviewerAgent, change_set_service: ChangeSetService):
        self.reviewer_agent = reviewer_agent
        self.change_set_service = change_set_service

    async def review_pull_request(
        self,
        pr_info: PullRequestInfo,
        instruction: CodeReviewInstruction,
        options: ReviewOptions | None = None,
    ) -> ReviewRunResult:
        """Review a pull request and publish (or, on a dry run, print) the comments.

        Args:
            pr_info: Pull request to review, with optional ignored files
            instruction: Comment language and project guidelines for the agent
            options: Run options; dry_run skips publishing entirely

        Returns:
            ReviewRunResult with the comments and, when published, per-comment results
        """
        options = options or ReviewOptions()
        state = ReviewState.FETCHING

        with LogContext(
            workspace=pr_info.workspace,
            repository=pr_info.repository,
            pull_request=pr_info.pr_number,
        ):
            try:
                logger.info("Reviewing pull request", state=str(state), dry_run=options.dry_run)

                # Both reads settle before the first failure is raised
                diff_result, comments_result = await asyncio.gather(
                    self.change_set_service.get_pull_request_diff(pr_info, pr_info.ignored_files),
                    self.change_set_service.list_pull_request_comments(pr_info),
                    return_exceptions=True,
                )
                for result in (diff_result, comments_result):
                    if isinstance(result, BaseException):
                        raise result
                diff_files = cast(list[DiffFile], diff_result)
                existing_comments = cast(list[ExistingComment], comments_result)
                logger.info(
                    "Fetched pull request",
                    files_count=len(diff_files),
                    existing_comments_count=len(existing_comments),
                )

                state = ReviewState.REVIEWING
                logger.info("Requesting review", state=str(state))
                proposed = await self.reviewer_agent.review(
                    instruction, diff_files, existing_comments
                )
                comments = to_publishable_comments(proposed)

                if options.dry_run:
                    state = ReviewState.DRY_RUN_REPORTING
                    logger.info("Dry run, not publishing", state=str(state), count=len(comments))
                    print(format_comments_for_display(comments))
                    state = ReviewState.DONE
                    logger.info("Review finished", state=str(state))
                    return ReviewRunResult(state=state, dry_run=True, comments=comments)

                state = ReviewState.PUBLISHING
                logger.info("Publishing comments", state=str(state), count=len(comments))
                publish_results = await self.change_set_service.create_pull_request_comments(
                    pr_info, comments
                )

                state = ReviewState.DONE
                logger.info(
                    "Review finished",
                    state=str(state),
                    created_count=sum(1 for result in publish_results if result.created),
                    rejected_count=sum(1 for result in publish_results if not result.created),
                )
                return ReviewRunResult(
                    state=state, comments=comments, publish_results=publish_results
                )

            except Exception:
                logger.error("Review failed", state=str(ReviewState.FAILED), failed_in=str(state))
                raise
