"""System prompts for the code reviewer agent."""

import json
from collections.abc import Sequence

from src.pr_reviewer.models import CodeReviewInstruction, DiffFile, ExistingComment

REVIEWER_ROLE = """You are a code reviewer.
Your role is to help developers improve their code.
You will receive an annotated diff with the code changes to be reviewed, and you should respond with feedback on the code.
"""

REVIEW_RULES = """Comment only on what needs improvement.
Comment only at included lines, not deleted ones.
Make sure to not include any comment similar to what has already been made.
The comment text must be formatted in markdown.
Always use an empathetic and educational writing style.
"""


def build_code_reviewer_prompt(instruction: CodeReviewInstruction) -> str:
    """Build the system prompt for the code reviewer agent.

    Args:
        instruction: Comment language and project guidelines

    Returns:
        System prompt string
    """
    return (
        REVIEWER_ROLE
        + REVIEW_RULES
        + f"Respond to the user in {instruction.comment_language} language.\n\n\n"
        + "Below are the code project guidelines:\n"
        + instruction.instruction
    )


def build_code_reviewer_query(
    diff_files: Sequence[DiffFile], existing_comments: Sequence[ExistingComment]
) -> str:
    """Build the user message holding the existing comments and the diff."""
    return (
        "Here are the current comments on the pull request:\n\n"
        + json.dumps(list(existing_comments), indent=2)
        + "\n\n"
        + "Now, here is the diff:\n\n"
        + json.dumps([file.to_dict() for file in diff_files], indent=2)
    )
