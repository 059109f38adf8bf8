"""Entry point wiring the Bitbucket client, the change set service and the agent together."""

from src.clients.bitbucket import BitbucketClient
from src.pr_reviewer.agents.code_reviewer import CodeReviewerAgent, ReviewerAgent
from src.pr_reviewer.change_set import ChangeSetService
from src.pr_reviewer.models import (
    CodeReviewInstruction,
    PullRequestInfo,
    ReviewOptions,
    ReviewRunResult,
)
from src.pr_reviewer.reviewer import PRReviewer
from src.utils.logging import clear_log_context


async def review_pull_request(
    pr_info: PullRequestInfo,
    instruction: CodeReviewInstruction,
    options: ReviewOptions | None = None,
    *,
    bitbucket_client: BitbucketClient | None = None,
    reviewer_agent: ReviewerAgent | None = None,
) -> ReviewRunResult:
    """Review one pull request end to end.

    Each call is an independent run: nothing is cached or kept between calls.

    Args:
        pr_info: Pull request to review
        instruction: Comment language and project guidelines
        options: Run options (dry run)
        bitbucket_client: Client to use instead of one configured from the environment;
            the caller keeps ownership and closes it
        reviewer_agent: Agent to use instead of the OpenAI-backed CodeReviewerAgent
    """
    if bitbucket_client is not None:
        return await _run_review(bitbucket_client, pr_info, instruction, options, reviewer_agent)

    # Only a client built here is closed here
    async with BitbucketClient() as client:
        return await _run_review(client, pr_info, instruction, options, reviewer_agent)


async def _run_review(
    client: BitbucketClient,
    pr_info: PullRequestInfo,
    instruction: CodeReviewInstruction,
    options: ReviewOptions | None,
    reviewer_agent: ReviewerAgent | None,
) -> ReviewRunResult:
    clear_log_context()
    reviewer = PRReviewer(
        reviewer_agent=reviewer_agent or CodeReviewerAgent(),
        change_set_service=ChangeSetService(client),
    )
    return await reviewer.review_pull_request(pr_info, instruction, options)
