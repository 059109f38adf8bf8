"""Utility for displaying and saving PR review results."""

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from src.pr_reviewer.models import (
    CommentPublishResult,
    PublishableComment,
    PullRequestInfo,
    ReviewRunResult,
)


def save_review_to_file(
    result: ReviewRunResult,
    pr_info: PullRequestInfo,
    output_dir: str = "reviews",
) -> str:
    """Save a review run to a timestamped JSON file.

    Args:
        result: Finished review run
        pr_info: Pull request that was reviewed
        output_dir: Directory to save reviews (default: "reviews")

    Returns:
        Path to saved file
    """
    reviews_dir = Path(output_dir)
    reviews_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    filename = f"{pr_info.workspace}-{pr_info.repository}-pr-{pr_info.pr_number}-{timestamp}.json"
    filepath = reviews_dir / filename

    review_data = {
        "workspace": pr_info.workspace,
        "repository": pr_info.repository,
        "pr_number": pr_info.pr_number,
        **result.to_dict(),
    }
    with open(filepath, "w") as f:
        json.dump(review_data, f, indent=2)

    return str(filepath)


def format_comment_for_display(comment: PublishableComment, index: int | None = None) -> str:
    """Format one publishable comment as `path:line` followed by its indented body."""
    location = f"{comment['inline']['path']}:{comment['inline']['to']}"
    prefix = f"  {index}. " if index is not None else "  "
    body = "\n".join(f"     {line}" for line in comment["content"]["raw"].splitlines())
    return f"{prefix}📄 {location}\n{body}\n"


def format_comments_for_display(comments: Sequence[PublishableComment]) -> str:
    """Format proposed comments for console display.

    Args:
        comments: Comments in the shape they would be published

    Returns:
        Formatted string for console output
    """
    if not comments:
        return "No comments.\n"

    lines = [f"\n📝 Review Comments ({len(comments)}):\n"]
    for i, comment in enumerate(comments, 1):
        lines.append(format_comment_for_display(comment, i))
    return "\n".join(lines)


def format_publish_results_for_display(results: Sequence[CommentPublishResult]) -> str:
    """Summarize which comments Bitbucket accepted and which it rejected."""
    if not results:
        return "Nothing published.\n"

    created = [result for result in results if result.created]
    rejected = [result for result in results if not result.created]

    lines = [f"\n✅ Published {len(created)}/{len(results)} comments"]
    for result in rejected:
        inline = result.comment["inline"]
        lines.append(f"  ❌ {inline['path']}:{inline['to']} rejected (HTTP {result.status_code})")
    return "\n".join(lines) + "\n"
