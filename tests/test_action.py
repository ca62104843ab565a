import json
from unittest.mock import AsyncMock, MagicMock

import pytest

import action
from agents.retry import QuotaExceededError
from config import Settings
from models import PRDetails

DIFF = "\n".join(["--- a/a.py", "+++ b/a.py", "@@ -1,1 +1,2 @@", " a", "+b", ""])


def event(action_name, **extra):
    payload = {
        "action": action_name,
        "number": 4,
        "repository": {"name": "demo", "owner": {"login": "octo"}},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def github():
    github = MagicMock()
    github.fetch_pr_details = AsyncMock(
        return_value=PRDetails(owner="octo", repo="demo", pull_number=4)
    )
    github.fetch_pr_diff = AsyncMock(return_value=DIFF)
    github.fetch_compare_diff = AsyncMock(return_value=DIFF)
    github.create_review = AsyncMock(return_value={"id": 1})
    return github


@pytest.fixture
def llm():
    llm = MagicMock()
    llm.generate = AsyncMock(
        return_value=json.dumps({"reviews": [{"lineNumber": 2, "reviewComment": "hm"}]})
    )
    return llm


@pytest.fixture
def settings():
    return Settings(base_delay_ms=0, jitter_ms=0)


@pytest.mark.asyncio
async def test_opened_reviews_full_diff(settings, github, llm):
    assert await action.run(settings, event("opened"), llm, github) == 0

    github.fetch_pr_diff.assert_awaited_once_with("octo", "demo", 4)
    github.create_review.assert_awaited_once()
    comments = github.create_review.await_args.args[3]
    assert [(c.path, c.position) for c in comments] == [("a.py", 2)]


@pytest.mark.asyncio
async def test_synchronize_reviews_pushed_range(settings, github, llm):
    await action.run(settings, event("synchronize", before="aaa", after="bbb"), llm, github)

    github.fetch_compare_diff.assert_awaited_once_with("octo", "demo", "aaa", "bbb")
    github.fetch_pr_diff.assert_not_awaited()


@pytest.mark.asyncio
async def test_unsupported_action_does_nothing(settings, github, llm):
    assert await action.run(settings, event("closed"), llm, github) == 0

    llm.generate.assert_not_awaited()
    github.create_review.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_diff_posts_nothing(settings, github, llm):
    github.fetch_pr_diff.return_value = ""

    await action.run(settings, event("opened"), llm, github)

    llm.generate.assert_not_awaited()
    github.create_review.assert_not_awaited()


@pytest.mark.asyncio
async def test_quota_failure_posts_nothing(settings, github, llm):
    llm.generate.side_effect = RuntimeError("billing account disabled")

    with pytest.raises(QuotaExceededError):
        await action.run(settings, event("opened"), llm, github)
    github.create_review.assert_not_awaited()


def test_main_reports_quota_failure(tmp_path, monkeypatch, capsys):
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps(event("opened")))
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_path))
    monkeypatch.setattr(action.GeminiClient, "from_settings", classmethod(lambda cls, s: MagicMock()))
    monkeypatch.setattr(action, "run", AsyncMock(side_effect=QuotaExceededError()))

    assert action.main() == 1
    assert "::error::Google Gemini quota was exceeded" in capsys.readouterr().out
