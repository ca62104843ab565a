# agents/review_agent.py
import json
from typing import List, Optional

from pydantic import ValidationError

from models import AIReviewResponse, DiffChunk, DiffFile, PRDetails, ReviewSuggestion

from .llm_client import GeminiClient
from .retry import RetryPolicy

INSTRUCTIONS = """Your task is to review pull requests. Instructions:
- Provide the response in following JSON format:  {"reviews": [{"lineNumber":  <line_number>, "reviewComment": "<review comment>"}]}
- Do not give positive comments or compliments.
- Provide comments and suggestions ONLY if there is something to improve, otherwise "reviews" should be an empty array.
- Write the comment in GitHub Markdown format.
- Use the given description only for the overall context and only comment the code.
- IMPORTANT: NEVER suggest adding comments to the code."""


class ResponseFormatError(ValueError):
    pass


def _numbered_changes(chunk: DiffChunk) -> str:
    lines = []
    for change in chunk.changes:
        lines.append(f"{change.display_line} {change.content}")
    return "\n".join(lines)


def build_prompt(diff_file: DiffFile, chunk: DiffChunk, pr_details: PRDetails) -> str:
    return f"""{INSTRUCTIONS}

Review the following code diff in the file "{diff_file.path}" and take the pull request title and description into account when writing the response.

Pull request title: {pr_details.title}
Pull request description:

---
{pr_details.description}
---

Git diff to review:

```diff
{chunk.content}
{_numbered_changes(chunk)}
```
"""


def parse_review_response(text: str) -> List[ReviewSuggestion]:
    """
    Parse the model reply into suggestions.

    Raises ResponseFormatError when the reply is not JSON of the shape
    {"reviews": [{"lineNumber": ..., "reviewComment": ...}]}.
    """
    try:
        payload = json.loads(text or "{}")
    except json.JSONDecodeError as e:
        raise ResponseFormatError(f"Gemini reply is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ResponseFormatError("Gemini reply is not a JSON object")
    try:
        return AIReviewResponse.model_validate(payload).reviews
    except ValidationError as e:
        raise ResponseFormatError(
            f"Gemini reply has an unexpected shape ({e.error_count()} validation errors)"
        ) from e


async def get_ai_response(
    llm: GeminiClient,
    retry_policy: RetryPolicy,
    prompt: str,
) -> Optional[List[ReviewSuggestion]]:
    async def attempt() -> List[ReviewSuggestion]:
        text = await llm.generate(prompt)
        return parse_review_response(text)

    return await retry_policy.invoke(attempt)
