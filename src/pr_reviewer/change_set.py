"""Pull request reads and writes composed from Bitbucket client calls."""

from collections.abc import Sequence
from typing import Any

from src.clients.bitbucket import BitbucketClient
from src.pr_reviewer.exceptions import BitbucketUpstreamError
from src.pr_reviewer.models import (
    CommentPublishResult,
    DiffFile,
    ExistingComment,
    PublishableComment,
    PullRequestInfo,
    PullRequestRef,
)
from src.pr_reviewer.utils.diff_parser import parse_git_diff
from src.utils.logging import get_logger

logger = get_logger(__name__)


def parse_pull_request_ref(pr_data: Any) -> PullRequestRef:
    """Extract the commit hashes needed to request a diff.

    Raises:
        BitbucketUpstreamError: If the payload is not a pull request, which is
            what an error body passed through by the client looks like
    """
    try:
        return PullRequestRef(
            id=pr_data["id"],
            source_commit_hash=pr_data["source"]["commit"]["hash"],
            destination_commit_hash=pr_data["destination"]["commit"]["hash"],
        )
    except (KeyError, TypeError) as exc:
        raise BitbucketUpstreamError(
            "Bitbucket pull request payload is missing commit hashes",
            response_body=pr_data,
        ) from exc


def remove_files_from_diff(
    files: list[DiffFile], ignored_files: Sequence[str] | None = None
) -> list[DiffFile]:
    """Drop files whose old or new path exactly matches an ignored path."""
    if not ignored_files:
        return files

    ignored = set(ignored_files)
    return [file for file in files if file.new_path not in ignored and file.old_path not in ignored]


class ChangeSetService:
    """Everything the reviewer needs to read from, and write to, a pull request."""

    def __init__(self, bitbucket_client: BitbucketClient):
        self.bitbucket_client = bitbucket_client

    async def get_pull_request_diff(
        self, pr_info: PullRequestInfo, ignored_files: Sequence[str] | None = None
    ) -> list[DiffFile]:
        """Fetch the pull request's diff as line-annotated files.

        Args:
            pr_info: Pull request to read
            ignored_files: Exact paths to leave out, matched against old and new paths

        Returns:
            List of DiffFile objects between the source and destination commits
        """
        pr_data = await self.bitbucket_client.get_pull_request(
            pr_info.workspace, pr_info.repository, pr_info.pr_number
        )
        pr_ref = parse_pull_request_ref(pr_data)

        diff_text = await self.bitbucket_client.get_source_code_diff(
            pr_info.workspace,
            pr_info.repository,
            pr_ref.source_commit_hash,
            pr_ref.destination_commit_hash,
        )
        files = parse_git_diff(diff_text)
        kept = remove_files_from_diff(files, ignored_files)

        logger.info(
            "Fetched pull request diff",
            source=pr_ref.source_commit_hash,
            destination=pr_ref.destination_commit_hash,
            files_count=len(files),
            ignored_count=len(files) - len(kept),
        )
        return kept

    async def list_pull_request_comments(self, pr_info: PullRequestInfo) -> list[ExistingComment]:
        return await self.bitbucket_client.list_pull_request_comments(
            pr_info.workspace, pr_info.repository, pr_info.pr_number
        )

    async def create_pull_request_comments(
        self, pr_info: PullRequestInfo, comments: Sequence[PublishableComment]
    ) -> list[CommentPublishResult]:
        return await self.bitbucket_client.create_pull_request_comments(
            pr_info.workspace, pr_info.repository, pr_info.pr_number, comments
        )
