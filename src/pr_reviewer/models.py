"""Data models for PR reviewer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class PullRequestInfo(BaseModel):
    """Identifies the pull request under review.

    Immutable for the duration of a review run.
    """

    model_config = ConfigDict(frozen=True)

    workspace: str = Field(min_length=1)
    repository: str = Field(min_length=1)
    pr_number: PositiveInt
    ignored_files: tuple[str, ...] | None = None


class CodeReviewInstruction(BaseModel):
    """Project-specific guidance handed to the reviewing agent untouched."""

    model_config = ConfigDict(frozen=True)

    comment_language: str
    instruction: str


class ReviewOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    dry_run: bool = False


class PullRequestRef(BaseModel):
    """Server-reported identity of a pull request, used to request its diff."""

    id: int
    source_commit_hash: str
    destination_commit_hash: str


class ProposedComment(BaseModel):
    """A single review remark suggested by the reviewing agent."""

    comment_line: int = Field(ge=0, description="Line number in the new version of the file")
    filepath: str = Field(description="Path of the file the comment refers to")
    comment: str = Field(description="Markdown body of the review comment")


class ProposedComments(BaseModel):
    """Structured output schema of the reviewing agent."""

    comments: list[ProposedComment]


class CommentContent(TypedDict):
    raw: str


class InlineLocation(TypedDict):
    to: int
    path: str


class ExistingComment(TypedDict, total=False):
    """Comment already published on a Bitbucket pull request.

    Fields are optional to handle variations in Bitbucket API responses. General
    comments have no `inline` location.
    """

    id: int
    content: CommentContent
    inline: InlineLocation | None
    user: dict[str, Any] | None
    created_on: str | None
    deleted: bool


class PublishableComment(TypedDict):
    """Body accepted by the Bitbucket comment creation endpoint."""

    content: CommentContent
    inline: InlineLocation


@dataclass(frozen=True)
class CommentPublishResult:
    """Outcome of publishing a single comment.

    `created` is False when Bitbucket answered with a non-2xx status, so a partial
    publication stays visible to the caller.
    """

    comment: PublishableComment
    created: bool
    status_code: int
    response_body: Any = None


class ReviewState(str, Enum):
    """States of a single review run."""

    FETCHING = "fetching"
    REVIEWING = "reviewing"
    DRY_RUN_REPORTING = "dry_run_reporting"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class ReviewRunResult:
    """Summary of a finished review run."""

    state: ReviewState
    dry_run: bool = False
    comments: list[PublishableComment] = field(default_factory=list)
    publish_results: list[CommentPublishResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "state": self.state.value,
            "dry_run": self.dry_run,
            "comments": list(self.comments),
            "publish_results": [
                {
                    "comment": result.comment,
                    "created": result.created,
                    "status_code": result.status_code,
                }
                for result in self.publish_results
            ],
        }


DiffFileType = Literal["add", "delete", "modify", "rename"]
DiffChangeType = Literal["insert", "delete", "normal"]


class DiffChange:
    """A single line of a diff hunk, annotated with its line numbers."""

    def __init__(
        self,
        type: DiffChangeType,
        content: str,
        line_number: int | None = None,
        old_line_number: int | None = None,
        new_line_number: int | None = None,
    ):
        self.type = type
        self.content = content
        self.line_number = line_number
        self.old_line_number = old_line_number
        self.new_line_number = new_line_number

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        data: dict[str, Any] = {"type": self.type, "content": self.content}
        if self.type == "normal":
            data["oldLineNumber"] = self.old_line_number
            data["newLineNumber"] = self.new_line_number
        else:
            data["lineNumber"] = self.line_number
        return data


class DiffHunk:
    """A `@@ ... @@` section of a file diff."""

    def __init__(
        self,
        content: str,
        old_start: int,
        old_lines: int,
        new_start: int,
        new_lines: int,
    ):
        self.content = content
        self.old_start = old_start
        self.old_lines = old_lines
        self.new_start = new_start
        self.new_lines = new_lines
        self.changes: list[DiffChange] = []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "content": self.content,
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "changes": [change.to_dict() for change in self.changes],
        }


class DiffFile:
    """Represents the changes to one file in a pull request diff."""

    def __init__(
        self,
        old_path: str,
        new_path: str,
        type: DiffFileType = "modify",
        is_binary: bool = False,
    ):
        self.old_path = old_path
        self.new_path = new_path
        self.type = type
        self.is_binary = is_binary
        self.hunks: list[DiffHunk] = []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "oldPath": self.old_path,
            "newPath": self.new_path,
            "type": self.type,
            "isBinary": self.is_binary,
            "hunks": [hunk.to_dict() for hunk in self.hunks],
        }

    def __repr__(self) -> str:
        return f"DiffFile(old_path={self.old_path!r}, new_path={self.new_path!r}, type={self.type!r})"
