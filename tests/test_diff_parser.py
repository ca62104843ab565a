from diff_parser import parse_unified_diff
from models import ChangeKind
from position_mapper import build_line_position_map

SAMPLE_DIFF = "\n".join(
    [
        "diff --git a/app.py b/app.py",
        "index 1111111..2222222 100644",
        "--- a/app.py",
        "+++ b/app.py",
        "@@ -1,3 +1,4 @@",
        " import os",
        "-import sys",
        "+import json",
        "+import logging",
        " ",
        "@@ -10,2 +11,3 @@ def main():",
        "     x = 1",
        "+    y = 2",
        "     return x",
        "diff --git a/old.py b/old.py",
        "deleted file mode 100644",
        "index 3333333..0000000",
        "--- a/old.py",
        "+++ /dev/null",
        "@@ -1,2 +0,0 @@",
        "-a = 1",
        "-b = 2",
        "",
    ]
)

NO_NEWLINE_DIFF = "\n".join(
    [
        "diff --git a/x.txt b/x.txt",
        "--- a/x.txt",
        "+++ b/x.txt",
        "@@ -1 +1 @@",
        "-old",
        "\\ No newline at end of file",
        "+new",
        "\\ No newline at end of file",
        "",
    ]
)


def test_parse_files_and_chunks():
    files = parse_unified_diff(SAMPLE_DIFF)

    assert [f.path for f in files] == ["app.py", None]
    app = files[0]
    assert [c.content for c in app.chunks] == [
        "@@ -1,3 +1,4 @@",
        "@@ -10,2 +11,3 @@ def main():",
    ]


def test_change_kinds_and_line_numbers():
    first_chunk = parse_unified_diff(SAMPLE_DIFF)[0].chunks[0]

    assert [c.kind for c in first_chunk.changes] == [
        ChangeKind.CONTEXT,
        ChangeKind.REMOVED,
        ChangeKind.ADDED,
        ChangeKind.ADDED,
        ChangeKind.CONTEXT,
    ]
    assert [(c.old_line, c.new_line) for c in first_chunk.changes] == [
        (1, 1),
        (2, None),
        (None, 2),
        (None, 3),
        (3, 4),
    ]
    assert first_chunk.changes[2].content == "+import json"


def test_parsed_diff_position_map():
    app = parse_unified_diff(SAMPLE_DIFF)[0]

    assert build_line_position_map(app) == {1: 1, 2: 3, 3: 4, 4: 5, 11: 6, 12: 7, 13: 8}


def test_no_newline_marker_counts_as_a_diff_line():
    changes = parse_unified_diff(NO_NEWLINE_DIFF)[0].chunks[0].changes

    assert [c.kind for c in changes] == [
        ChangeKind.REMOVED,
        ChangeKind.REMOVED,
        ChangeKind.ADDED,
        ChangeKind.ADDED,
    ]
    assert build_line_position_map(parse_unified_diff(NO_NEWLINE_DIFF)[0]) == {1: 3}


def test_chunk_keeps_raw_hunk_header():
    chunk = parse_unified_diff(NO_NEWLINE_DIFF)[0].chunks[0]

    assert chunk.content == "@@ -1 +1 @@"
