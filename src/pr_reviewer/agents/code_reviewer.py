"""Code reviewer agent: turns a diff into proposed inline comments."""

from collections.abc import Sequence
from typing import Any, Protocol

from openai import AsyncOpenAI

from src.clients.openai import get_async_openai_client
from src.pr_reviewer.agents.prompts import build_code_reviewer_prompt, build_code_reviewer_query
from src.pr_reviewer.exceptions import ReviewerAgentError
from src.pr_reviewer.models import (
    CodeReviewInstruction,
    DiffFile,
    ExistingComment,
    ProposedComments,
)
from src.utils.config import get_reviewer_model
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ReviewerAgent(Protocol):
    """Anything that can review a diff.

    Returning None means there is nothing to add. The agent, not the caller,
    is responsible for not repeating existing comments.
    """

    async def review(
        self,
        instruction: CodeReviewInstruction,
        diff_files: Sequence[DiffFile],
        existing_comments: Sequence[ExistingComment],
    ) -> ProposedComments | None: ...


def _find_refusal(response: Any) -> str | None:
    """Return the model's refusal message, if the response holds one."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "refusal":
                return getattr(content, "refusal", None) or "refused"
    return None


class CodeReviewerAgent:
    """Reviewing agent backed by the OpenAI Responses API with structured output."""

    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None):
        self._client = client
        self.model = model or get_reviewer_model()

    @property
    def client(self) -> AsyncOpenAI:
        # Created on first use so a missing API key only fails an actual review
        if self._client is None:
            self._client = get_async_openai_client()
        return self._client

    async def review(
        self,
        instruction: CodeReviewInstruction,
        diff_files: Sequence[DiffFile],
        existing_comments: Sequence[ExistingComment],
    ) -> ProposedComments | None:
        """Ask the model for review comments on the diff.

        Args:
            instruction: Comment language and project guidelines
            diff_files: Line-annotated diff of the pull request
            existing_comments: Comments already on the pull request

        Returns:
            Parsed comments, or None when the model produced no parsed output

        Raises:
            ReviewerAgentError: If the model refused or returned an unexpected shape
        """
        logger.info(
            "Calling code reviewer agent",
            model=self.model,
            files_count=len(diff_files),
            existing_comments_count=len(existing_comments),
        )

        response = await self.client.responses.parse(
            model=self.model,
            input=[
                {"role": "system", "content": build_code_reviewer_prompt(instruction)},
                {
                    "role": "user",
                    "content": build_code_reviewer_query(diff_files, existing_comments),
                },
            ],
            text_format=ProposedComments,
        )

        refusal = _find_refusal(response)
        if refusal:
            raise ReviewerAgentError(f"Code reviewer agent refused to review: {refusal}")

        parsed = getattr(response, "output_parsed", None)
        if parsed is None:
            logger.info("Code reviewer agent returned no parsed output")
            return None
        if not isinstance(parsed, ProposedComments):
            raise ReviewerAgentError(
                f"Code reviewer agent returned unexpected output type {type(parsed).__name__}"
            )

        logger.info("Code reviewer agent finished", comments_count=len(parsed.comments))
        return parsed
