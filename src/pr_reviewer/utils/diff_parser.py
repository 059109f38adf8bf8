"""Parse git unified diff text into line-annotated file entries."""

import re

from src.pr_reviewer.models import DiffChange, DiffFile, DiffHunk

# Match file headers like: diff --git a/src/app.ts b/src/app.ts
FILE_HEADER_PATTERN = re.compile(r"^diff --git a/(.+) b/(.+)$")
# Match diff chunk headers like @@ -10,7 +10,8 @@ optional context
HUNK_HEADER_PATTERN = re.compile(r"^@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@")

DEV_NULL = "/dev/null"


def _strip_path_prefix(path: str) -> str:
    """Remove the a/ or b/ prefix git puts in front of --- and +++ paths."""
    path = path.split("\t", 1)[0]
    if path == DEV_NULL:
        return path
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _parse_hunk_header(line: str) -> DiffHunk | None:
    match = HUNK_HEADER_PATTERN.match(line)
    if not match:
        return None

    old_start, old_lines, new_start, new_lines = match.groups()
    return DiffHunk(
        content=line,
        old_start=int(old_start),
        # An omitted count means a single line
        old_lines=int(old_lines) if old_lines is not None else 1,
        new_start=int(new_start),
        new_lines=int(new_lines) if new_lines is not None else 1,
    )


def parse_git_diff(diff_text: str) -> list[DiffFile]:
    """Parse a git diff into files, hunks and changes.

    Every change carries the line numbers it refers to: inserts the line in the
    new file, deletes the line in the old file, context lines both.

    Args:
        diff_text: Raw output of `git diff` (or Bitbucket's diff endpoint)

    Returns:
        List of DiffFile objects in the order they appear in the diff
    """
    files: list[DiffFile] = []
    current_file: DiffFile | None = None
    current_hunk: DiffHunk | None = None
    old_line = 0
    new_line = 0

    for line in diff_text.splitlines():
        header = FILE_HEADER_PATTERN.match(line)
        if header:
            current_file = DiffFile(old_path=header.group(1), new_path=header.group(2))
            current_hunk = None
            files.append(current_file)
            continue

        if current_file is None:
            continue

        if line.startswith("@@"):
            current_hunk = _parse_hunk_header(line)
            if current_hunk is not None:
                current_file.hunks.append(current_hunk)
                old_line = current_hunk.old_start
                new_line = current_hunk.new_start
            continue

        if current_hunk is None:
            # Extended header lines between "diff --git" and the first hunk
            if line.startswith("new file mode"):
                current_file.type = "add"
            elif line.startswith("deleted file mode"):
                current_file.type = "delete"
            elif line.startswith("rename from "):
                current_file.old_path = line[len("rename from ") :]
                current_file.type = "rename"
            elif line.startswith("rename to "):
                current_file.new_path = line[len("rename to ") :]
                current_file.type = "rename"
            elif line.startswith("Binary files ") or line.startswith("GIT binary patch"):
                current_file.is_binary = True
            elif line.startswith("--- "):
                old_path = _strip_path_prefix(line[4:])
                if old_path == DEV_NULL:
                    current_file.type = "add"
                else:
                    current_file.old_path = old_path
            elif line.startswith("+++ "):
                new_path = _strip_path_prefix(line[4:])
                if new_path == DEV_NULL:
                    current_file.type = "delete"
                else:
                    current_file.new_path = new_path
            continue

        if line.startswith("\\"):
            # "\ No newline at end of file"
            continue

        if line.startswith("+"):
            current_hunk.changes.append(
                DiffChange(type="insert", content=line, line_number=new_line)
            )
            new_line += 1
        elif line.startswith("-"):
            current_hunk.changes.append(
                DiffChange(type="delete", content=line, line_number=old_line)
            )
            old_line += 1
        else:
            current_hunk.changes.append(
                DiffChange(
                    type="normal",
                    content=line,
                    old_line_number=old_line,
                    new_line_number=new_line,
                )
            )
            old_line += 1
            new_line += 1

    return files
