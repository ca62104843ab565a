# agents/writer_agent.py
import logging
import math
import re
from typing import List, Optional, Union

from models import LinePositionMap, ReviewComment, ReviewSuggestion

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_line_number(value: Union[int, float, str, None]) -> Optional[int]:
    """
    Read a model-supplied line number the way parseInt would: the leading
    integer of its text form ("12-14" -> 12). None when there isn't one.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def writer_agent(
    path: Optional[str],
    suggestions: List[ReviewSuggestion],
    line_positions: LinePositionMap,
) -> List[ReviewComment]:
    """
    Turn model suggestions for one file into position-anchored review comments.

    Suggestions whose line number is not an integer, or that do not land on a
    line present in the diff, are dropped with a warning. Order is preserved.
    """
    if not path:
        return []

    comments: List[ReviewComment] = []
    for suggestion in suggestions:
        line_number = parse_line_number(suggestion.line_number)
        if line_number is None:
            logger.warning(
                'Skipping comment for file %s: invalid line number "%s".',
                path,
                suggestion.line_number,
            )
            continue

        position = line_positions.get(line_number)
        if position is None:
            logger.warning(
                "Skipping comment for file %s: unable to map line %d to diff position.",
                path,
                line_number,
            )
            continue

        comments.append(
            ReviewComment(path=path, position=position, body=suggestion.review_comment)
        )
    return comments
