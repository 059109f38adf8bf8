"""Tests for the OpenAI-backed code reviewer agent."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pr_reviewer.agents.code_reviewer import CodeReviewerAgent
from src.pr_reviewer.exceptions import ReviewerAgentError
from src.pr_reviewer.models import (
    CodeReviewInstruction,
    DiffChange,
    DiffFile,
    DiffHunk,
    ProposedComment,
    ProposedComments,
)


def _diff_files() -> list[DiffFile]:
    file = DiffFile("file1.ts", "file1.ts")
    hunk = DiffHunk("@@ -1,5 +1,5 @@", 1, 5, 1, 5)
    hunk.changes.append(DiffChange(type="insert", content="+const a = 1;", line_number=1))
    file.hunks.append(hunk)
    return [file]


EXISTING_COMMENTS = [
    {"id": 1, "content": {"raw": "Existing comment"}, "inline": {"to": 5, "path": "file1.ts"}}
]


def _response(output_parsed=None, output=None):
    return SimpleNamespace(output_parsed=output_parsed, output=output or [])


@pytest.fixture(autouse=True)
def clean_reviewer_env(monkeypatch):
    monkeypatch.delenv("REVIEWER_MODEL", raising=False)


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.responses.parse = AsyncMock()
    return client


@pytest.fixture
def agent(openai_client):
    return CodeReviewerAgent(client=openai_client)


class TestCodeReviewerAgentReview:
    @pytest.mark.asyncio
    async def test_calls_openai_and_returns_parsed_comments(self, agent, openai_client):
        parsed = ProposedComments(
            comments=[ProposedComment(comment_line=10, filepath="file1.ts", comment="Test")]
        )
        openai_client.responses.parse.return_value = _response(output_parsed=parsed)
        instruction = CodeReviewInstruction(comment_language="en", instruction="Test instruction")
        diff_files = _diff_files()

        result = await agent.review(instruction, diff_files, EXISTING_COMMENTS)

        assert result is parsed
        kwargs = openai_client.responses.parse.await_args.kwargs
        assert kwargs["model"] == "o4-mini"
        assert kwargs["text_format"] is ProposedComments
        system_message, user_message = kwargs["input"]
        assert system_message["role"] == "system"
        assert "Respond to the user in en language" in system_message["content"]
        assert user_message["role"] == "user"
        assert json.dumps(EXISTING_COMMENTS, indent=2) in user_message["content"]
        assert (
            json.dumps([file.to_dict() for file in diff_files], indent=2)
            in user_message["content"]
        )

    @pytest.mark.asyncio
    async def test_prompt_includes_language_and_guidelines(self, agent, openai_client):
        openai_client.responses.parse.return_value = _response(
            output_parsed=ProposedComments(comments=[])
        )
        instruction = CodeReviewInstruction(
            comment_language="pt-BR", instruction="Custom project guidelines"
        )

        await agent.review(instruction, [], [])

        system_prompt = openai_client.responses.parse.await_args.kwargs["input"][0]["content"]
        assert "Respond to the user in pt-BR language" in system_prompt
        assert system_prompt.endswith("Custom project guidelines")
        assert "not include any comment similar to what has already been made" in system_prompt

    @pytest.mark.asyncio
    async def test_model_from_environment(self, openai_client, monkeypatch):
        monkeypatch.setenv("REVIEWER_MODEL", "gpt-5-mini")
        openai_client.responses.parse.return_value = _response()
        agent = CodeReviewerAgent(client=openai_client)

        await agent.review(CodeReviewInstruction(comment_language="en", instruction=""), [], [])

        assert openai_client.responses.parse.await_args.kwargs["model"] == "gpt-5-mini"

    @pytest.mark.asyncio
    async def test_missing_parsed_output_means_no_comments(self, agent, openai_client):
        openai_client.responses.parse.return_value = _response(output_parsed=None)

        result = await agent.review(
            CodeReviewInstruction(comment_language="en", instruction=""), [], []
        )

        assert result is None

    @pytest.mark.asyncio
    async def test_refusal_raises_agent_error(self, agent, openai_client):
        refusal = SimpleNamespace(type="refusal", refusal="I can't help with that")
        openai_client.responses.parse.return_value = _response(
            output=[SimpleNamespace(type="message", content=[refusal])]
        )

        with pytest.raises(ReviewerAgentError, match="I can't help with that"):
            await agent.review(CodeReviewInstruction(comment_language="en", instruction=""), [], [])

    @pytest.mark.asyncio
    async def test_unexpected_output_type_raises_agent_error(self, agent, openai_client):
        openai_client.responses.parse.return_value = _response(output_parsed={"comments": []})

        with pytest.raises(ReviewerAgentError, match="unexpected output type"):
            await agent.review(CodeReviewInstruction(comment_language="en", instruction=""), [], [])

    @pytest.mark.asyncio
    async def test_openai_errors_propagate(self, agent, openai_client):
        error = RuntimeError("OpenAI API error")
        openai_client.responses.parse.side_effect = error

        with pytest.raises(RuntimeError) as exc_info:
            await agent.review(CodeReviewInstruction(comment_language="en", instruction=""), [], [])

        assert exc_info.value is error


class TestCodeReviewerAgentClient:
    def test_missing_api_key_only_fails_on_use(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setattr("src.clients.openai._global_client", None)

        agent = CodeReviewerAgent()

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            _ = agent.client

    def test_client_created_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        monkeypatch.setattr("src.clients.openai._global_client", None)

        agent = CodeReviewerAgent()

        assert agent.client is agent.client
        assert agent.client.api_key == "sk-test"


def test_proposed_comment_rejects_negative_line():
    with pytest.raises(ValueError):
        ProposedComment(comment_line=-1, filepath="a.ts", comment="x")
