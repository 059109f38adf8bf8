"""Tests for git diff parsing."""

from src.pr_reviewer.utils.diff_parser import parse_git_diff

MODIFIED_FILE_DIFF = """diff --git a/src/app.ts b/src/app.ts
index 83db48f..bf269f4 100644
--- a/src/app.ts
+++ b/src/app.ts
@@ -10,4 +10,5 @@ export function start() {
 const port = 3000;
-const host = "0.0.0.0";
+const host = "127.0.0.1";
+const debug = true;
 listen(port, host);
\\ No newline at end of file
"""

MULTI_FILE_DIFF = """diff --git a/README.md b/README.md
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/README.md
@@ -0,0 +1,2 @@
+# Project
+Hello
diff --git a/old.ts b/old.ts
deleted file mode 100644
index e69de29..0000000
--- a/old.ts
+++ /dev/null
@@ -1 +0,0 @@
-export {};
diff --git a/src/before.ts b/src/after.ts
similarity index 90%
rename from src/before.ts
rename to src/after.ts
index 1111111..2222222 100644
--- a/src/before.ts
+++ b/src/after.ts
@@ -1,2 +1,2 @@
-const a = 1;
+const a = 2;
 export { a };
diff --git a/logo.png b/logo.png
index 3333333..4444444 100644
Binary files a/logo.png and b/logo.png differ
"""


def test_parse_empty_diff():
    assert parse_git_diff("") == []


def test_parse_modified_file_annotates_line_numbers():
    files = parse_git_diff(MODIFIED_FILE_DIFF)

    assert len(files) == 1
    file = files[0]
    assert file.old_path == "src/app.ts"
    assert file.new_path == "src/app.ts"
    assert file.type == "modify"

    hunk = file.hunks[0]
    assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (10, 4, 10, 5)
    assert hunk.content.startswith("@@ -10,4 +10,5 @@")

    changes = [(change.type, change.content) for change in hunk.changes]
    assert changes == [
        ("normal", " const port = 3000;"),
        ("delete", '-const host = "0.0.0.0";'),
        ("insert", '+const host = "127.0.0.1";'),
        ("insert", "+const debug = true;"),
        ("normal", " listen(port, host);"),
    ]

    context, deleted, inserted, inserted_again, trailing = hunk.changes
    assert (context.old_line_number, context.new_line_number) == (10, 10)
    assert deleted.line_number == 11
    assert inserted.line_number == 11
    assert inserted_again.line_number == 12
    assert (trailing.old_line_number, trailing.new_line_number) == (12, 13)


def test_parse_added_deleted_renamed_and_binary_files():
    files = parse_git_diff(MULTI_FILE_DIFF)

    assert [(file.old_path, file.new_path, file.type) for file in files] == [
        ("README.md", "README.md", "add"),
        ("old.ts", "old.ts", "delete"),
        ("src/before.ts", "src/after.ts", "rename"),
        ("logo.png", "logo.png", "modify"),
    ]
    assert files[0].hunks[0].old_lines == 0
    assert [change.line_number for change in files[0].hunks[0].changes] == [1, 2]
    # Omitted counts in "@@ -1 +0,0 @@" default to one line
    assert files[1].hunks[0].old_lines == 1
    assert files[3].is_binary is True
    assert files[3].hunks == []


def test_to_dict_shape():
    file = parse_git_diff(MODIFIED_FILE_DIFF)[0]

    data = file.to_dict()

    assert data["oldPath"] == "src/app.ts"
    assert data["newPath"] == "src/app.ts"
    assert data["hunks"][0]["newStart"] == 10
    assert data["hunks"][0]["changes"][0] == {
        "type": "normal",
        "content": " const port = 3000;",
        "oldLineNumber": 10,
        "newLineNumber": 10,
    }
    assert data["hunks"][0]["changes"][2] == {
        "type": "insert",
        "content": '+const host = "127.0.0.1";',
        "lineNumber": 11,
    }
