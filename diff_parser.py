from typing import List, Optional

from unidiff import PatchSet
from unidiff.constants import LINE_TYPE_NO_NEWLINE

from models import ChangeKind, DiffChange, DiffChunk, DiffFile

DELETED_FILE = "/dev/null"


def _target_path(patched_file) -> Optional[str]:
    target = patched_file.target_file
    if not target or target == DELETED_FILE or patched_file.is_removed_file:
        return None
    if target.startswith("b/"):
        return target[2:]
    return target


def _hunk_header(hunk, diff_lines: List[str]) -> str:
    """
    The hunk's "@@ ... @@" line as it appears in the diff text.
    """
    first = hunk[0] if len(hunk) else None
    if first is not None and first.diff_line_no:
        # diff_line_no is 1-based; the header sits on the line above the body
        raw = diff_lines[first.diff_line_no - 2].rstrip("\r\n")
        if raw.startswith("@@"):
            return raw
    # an empty hunk has no body line to locate its header from
    return str(hunk).split("\n", 1)[0]


def _to_change(line, previous: Optional[DiffChange]) -> Optional[DiffChange]:
    content = line.line_type + line.value.rstrip("\n")
    if line.line_type == LINE_TYPE_NO_NEWLINE:
        if previous is None:
            return None
        # the marker occupies a diff line but refers to the line before it
        return DiffChange(
            kind=previous.kind,
            content=content,
            old_line=previous.old_line,
            new_line=previous.new_line,
        )
    if line.is_added:
        return DiffChange(kind=ChangeKind.ADDED, content=content, new_line=line.target_line_no)
    if line.is_removed:
        return DiffChange(kind=ChangeKind.REMOVED, content=content, old_line=line.source_line_no)
    return DiffChange(
        kind=ChangeKind.CONTEXT,
        content=content,
        old_line=line.source_line_no,
        new_line=line.target_line_no,
    )


def parse_unified_diff(diff_text: str) -> List[DiffFile]:
    diff_lines = diff_text.splitlines(keepends=True)
    patch = PatchSet(diff_lines)
    files = []
    for patched_file in patch:
        chunks = []
        for hunk in patched_file:
            changes: List[DiffChange] = []
            for line in hunk:
                change = _to_change(line, changes[-1] if changes else None)
                if change is not None:
                    changes.append(change)
            chunks.append(DiffChunk(content=_hunk_header(hunk, diff_lines), changes=changes))
        files.append(DiffFile(path=_target_path(patched_file), chunks=chunks))
    return files
