"""Async Bitbucket Cloud API client used by the PR reviewer."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import httpx

from src.pr_reviewer.exceptions import (
    BitbucketAuthError,
    BitbucketTransportError,
    BitbucketUpstreamError,
)
from src.pr_reviewer.models import CommentPublishResult, ExistingComment, PublishableComment
from src.utils.config import (
    get_bitbucket_access_token,
    get_bitbucket_api_base_url,
    get_bitbucket_strict_status,
    get_bitbucket_timeout_seconds,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)


COMMENTS_PAGE_SIZE = 50
SUCCESS_STATUS_MIN = 200
SUCCESS_STATUS_MAX = 299


class BitbucketClient:
    """Thin async wrapper around the Bitbucket pull request endpoints.

    Read methods hand back what Bitbucket returned. By default a non-2xx answer is
    not treated as an error: its JSON body is returned like any other payload.
    Pass ``strict_status=True`` (or set BITBUCKET_STRICT_STATUS=true) to raise
    BitbucketUpstreamError instead.
    """

    def __init__(
        self,
        *,
        access_token: str | None = None,
        api_base_url: str | None = None,
        strict_status: bool | None = None,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        base_url = api_base_url or get_bitbucket_api_base_url()
        self._access_token = access_token
        self._api_base_url = base_url.rstrip("/") + "/"
        self._strict_status = (
            get_bitbucket_strict_status() if strict_status is None else strict_status
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout_seconds or get_bitbucket_timeout_seconds(),
        )

    async def __aenter__(self) -> BitbucketClient:
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def access_token(self) -> str:
        """Resolve the bearer token: explicit argument first, then BITBUCKET_ACCESS_TOKEN."""
        if self._access_token:
            return self._access_token

        token = get_bitbucket_access_token()
        if token:
            return token

        raise BitbucketAuthError("BITBUCKET_ACCESS_TOKEN is not set")

    @property
    def strict_status(self) -> bool:
        return self._strict_status

    # ------------------------------------------------------------------
    # Public API wrappers
    # ------------------------------------------------------------------
    async def get_pull_request(
        self, workspace: str, repository: str, pr_number: int
    ) -> dict[str, Any]:
        response = await self._request(
            "GET", self._repository_url(workspace, repository, f"pullrequests/{pr_number}")
        )
        return self._parse_json_response(response)

    async def get_source_code_diff(
        self,
        workspace: str,
        repository: str,
        source_commit_hash: str,
        destination_commit_hash: str,
    ) -> str:
        """Get the unified diff between two commits as raw text."""
        response = await self._request(
            "GET",
            self._repository_url(
                workspace, repository, f"diffs/{source_commit_hash}...{destination_commit_hash}"
            ),
            params={"binary": "false"},
        )
        self._check_status(response)
        return response.text

    async def list_pull_request_comments(
        self, workspace: str, repository: str, pr_number: int
    ) -> list[ExistingComment]:
        """List every comment on a pull request, following page-number pagination.

        A page holding exactly COMMENTS_PAGE_SIZE items means another page may
        follow, so a pull request whose last page is full costs one extra request
        that comes back empty.
        """
        url = self._repository_url(workspace, repository, f"pullrequests/{pr_number}/comments/")
        comments: list[ExistingComment] = []
        page = 1

        while True:
            response = await self._request(
                "GET", url, params={"page": page, "pagelen": COMMENTS_PAGE_SIZE}
            )
            data = self._parse_json_response(response)
            values = data.get("values") if isinstance(data, dict) else None
            if not isinstance(values, list):
                logger.warning(
                    "Bitbucket comments page has no values, stopping pagination",
                    page=page,
                    status=response.status_code,
                )
                break

            comments.extend(values)
            logger.debug(
                "Fetched Bitbucket comments page",
                page=page,
                page_count=len(values),
                total_so_far=len(comments),
            )

            if len(values) < COMMENTS_PAGE_SIZE:
                break
            page += 1

        return comments

    async def create_pull_request_comment(
        self,
        workspace: str,
        repository: str,
        pr_number: int,
        comment: PublishableComment,
    ) -> CommentPublishResult:
        """Publish one comment.

        A rejected comment (non-2xx) is reported through the result, not raised.
        Transport failures still raise BitbucketTransportError.
        """
        response = await self._request(
            "POST",
            self._repository_url(workspace, repository, f"pullrequests/{pr_number}/comments"),
            json=dict(comment),
        )
        created = SUCCESS_STATUS_MIN <= response.status_code <= SUCCESS_STATUS_MAX
        body = self._safe_body(response)

        if not created:
            logger.warning(
                "Bitbucket rejected pull request comment",
                status=response.status_code,
                path=comment["inline"]["path"],
                line=comment["inline"]["to"],
                response_body=body,
            )

        return CommentPublishResult(
            comment=comment,
            created=created,
            status_code=response.status_code,
            response_body=body,
        )

    async def create_pull_request_comments(
        self,
        workspace: str,
        repository: str,
        pr_number: int,
        comments: Sequence[PublishableComment],
    ) -> list[CommentPublishResult]:
        """Publish all comments concurrently.

        Results come back in input order. Every request is allowed to settle
        before the first failure (in input order) is raised; comments already
        created stay created.
        """
        if not comments:
            return []

        logger.info("Publishing pull request comments", count=len(comments))
        results = await asyncio.gather(
            *(
                self.create_pull_request_comment(workspace, repository, pr_number, comment)
                for comment in comments
            ),
            return_exceptions=True,
        )

        publish_results: list[CommentPublishResult] = []
        for comment, result in zip(comments, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "Publishing pull request comment failed",
                    path=comment["inline"]["path"],
                    line=comment["inline"]["to"],
                    error=str(result),
                )
                raise result
            publish_results.append(result)
        return publish_results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _repository_url(self, workspace: str, repository: str, path: str) -> str:
        return f"{self._api_base_url}{workspace}/{repository}/{path}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.access_token}"}

        logger.debug("Bitbucket request", method=method, url=url, params=params)
        try:
            return await self._client.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.TransportError as exc:
            logger.warning(
                "Bitbucket request transport failure", method=method, url=url, error=str(exc)
            )
            raise BitbucketTransportError(
                f"{method} {url} failed: {exc}", method=method, url=url
            ) from exc

    def _check_status(self, response: httpx.Response) -> None:
        if not self._strict_status:
            return
        if SUCCESS_STATUS_MIN <= response.status_code <= SUCCESS_STATUS_MAX:
            return
        raise BitbucketUpstreamError(
            f"Bitbucket request failed with status {response.status_code}",
            status_code=response.status_code,
            response_body=self._safe_body(response),
        )

    def _parse_json_response(self, response: httpx.Response) -> Any:
        self._check_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise BitbucketUpstreamError(
                "Bitbucket returned a non-JSON response",
                status_code=response.status_code,
                response_body=response.text,
            ) from exc

    @staticmethod
    def _safe_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
