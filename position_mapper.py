from models import ChangeKind, DiffFile, LinePositionMap


def build_line_position_map(diff_file: DiffFile) -> LinePositionMap:
    """
    Map new-file line numbers to GitHub diff positions for one file.

    The position is the 1-based index of a line within the file's diff body,
    counted over every change (added, removed and context) across all chunks.
    When a line number shows up more than once (overlapping chunk context),
    the first position seen is kept.
    """
    positions: LinePositionMap = {}
    position = 0
    for chunk in diff_file.chunks:
        for change in chunk.changes:
            position += 1
            if change.kind is ChangeKind.REMOVED or change.new_line is None:
                continue
            positions.setdefault(change.new_line, position)
    return positions
