"""
GitHub Actions entry point.

Reads the pull_request event from GITHUB_EVENT_PATH, reviews the relevant diff
and posts a single comment-only review. A quota failure ends the run with an
error annotation and a non-zero exit code, without posting anything.
"""
import asyncio
import json
import logging
import os
import sys
from typing import Optional

from agents.llm_client import GeminiClient
from agents.retry import QuotaExceededError, RetryPolicy
from config import Settings, configure_logging
from reviewer import review_diff_text
from utils.github_client import GitHubClient

logger = logging.getLogger(__name__)


def load_event(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


async def fetch_event_diff(github: GitHubClient, event: dict) -> Optional[str]:
    """
    Diff to review for this event, or None for actions we don't handle.
    """
    owner = event["repository"]["owner"]["login"]
    repo = event["repository"]["name"]
    action = event.get("action")

    if action == "opened":
        return await github.fetch_pr_diff(owner, repo, event["number"])
    if action == "synchronize":
        return await github.fetch_compare_diff(owner, repo, event["before"], event["after"])
    logger.info("Unsupported event: %s", os.getenv("GITHUB_EVENT_NAME", action))
    return None


async def run(settings: Settings, event: dict, llm: GeminiClient, github: GitHubClient) -> int:
    owner = event["repository"]["owner"]["login"]
    repo = event["repository"]["name"]
    number = event["number"]

    pr_details = await github.fetch_pr_details(owner, repo, number)
    diff_text = await fetch_event_diff(github, event)
    if diff_text is None:
        return 0
    if not diff_text.strip():
        logger.info("No diff found")
        return 0

    comments = await review_diff_text(
        diff_text, pr_details, llm, RetryPolicy.from_settings(settings)
    )
    if comments:
        await github.create_review(owner, repo, number, comments)
        logger.info("Posted review with %d comments", len(comments))
    else:
        logger.info("No review comments generated")
    return 0


def main() -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        event = load_event(os.environ["GITHUB_EVENT_PATH"])
        llm = GeminiClient.from_settings(settings)
        github = GitHubClient.from_settings(settings)
        return asyncio.run(run(settings, event, llm, github))
    except QuotaExceededError as e:
        # workflow command; shows up as a failed-step annotation
        print(f"::error::{e.message}")
        return 1
    except Exception:
        logger.exception("Error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
