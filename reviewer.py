import logging
from typing import List

from agents.llm_client import GeminiClient
from agents.retry import RetryPolicy
from agents.review_agent import build_prompt, get_ai_response
from agents.writer_agent import writer_agent
from diff_parser import DELETED_FILE, parse_unified_diff
from models import DiffFile, PRDetails, ReviewComment
from position_mapper import build_line_position_map

logger = logging.getLogger(__name__)


def is_reviewable(diff_file: DiffFile) -> bool:
    return bool(diff_file.path) and diff_file.path != DELETED_FILE


async def analyze_code(
    files: List[DiffFile],
    pr_details: PRDetails,
    llm: GeminiClient,
    retry_policy: RetryPolicy,
) -> List[ReviewComment]:
    """
    Review every chunk of every file, one Gemini call at a time.

    QuotaExceededError propagates out of here untouched; callers must not post
    whatever was collected before it.
    """
    comments: List[ReviewComment] = []
    for diff_file in files:
        if not is_reviewable(diff_file):
            continue
        line_positions = build_line_position_map(diff_file)

        for index, chunk in enumerate(diff_file.chunks, start=1):
            logger.info(
                "Reviewing %s chunk %d/%d", diff_file.path, index, len(diff_file.chunks)
            )
            prompt = build_prompt(diff_file, chunk, pr_details)
            suggestions = await get_ai_response(llm, retry_policy, prompt)
            if suggestions is None:
                continue
            comments.extend(writer_agent(diff_file.path, suggestions, line_positions))
    return comments


async def review_diff_text(
    diff_text: str,
    pr_details: PRDetails,
    llm: GeminiClient,
    retry_policy: RetryPolicy,
) -> List[ReviewComment]:
    files = parse_unified_diff(diff_text)
    return await analyze_code(files, pr_details, llm, retry_policy)
