# utils/github_client.py

from typing import List, Optional

import httpx

from config import GITHUB_API_BASE, Settings
from models import PRDetails, ReviewComment

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
REVIEW_EVENT = "COMMENT"


class GitHubError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """
    Minimal GitHub REST client: PR metadata, diffs and batched reviews.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: str = GITHUB_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "PR-Review-Agent",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(token=settings.github_token, api_base=settings.github_api_base)

    @property
    def token_available(self) -> bool:
        return "Authorization" in self.headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=30.0, headers=self.headers, transport=self._transport
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.api_base}{path}"
        async with self._client() as client:
            resp = await client.request(method, url, **kwargs)
            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                # Attach response text for debugging
                raise GitHubError(
                    f"GitHub returned {resp.status_code}: {resp.text}",
                    status_code=resp.status_code,
                ) from e
            return resp

    # -----------------------------------------------------------
    # PR metadata
    # -----------------------------------------------------------
    async def fetch_pr_details(self, owner: str, repo: str, pr_number: int) -> PRDetails:
        resp = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pr_number}")
        j = resp.json()
        return PRDetails(
            owner=owner,
            repo=repo,
            pull_number=pr_number,
            title=j.get("title") or "",
            description=j.get("body") or "",
        )

    # -----------------------------------------------------------
    # Diffs
    # -----------------------------------------------------------
    async def fetch_pr_diff(self, owner: str, repo: str, pr_number: int) -> str:
        resp = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{pr_number}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return resp.text

    async def fetch_compare_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        """
        Diff between two commits; used to review only what a push added.
        """
        resp = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return resp.text

    # -----------------------------------------------------------
    # Inline review (single batched review, comment-only)
    # -----------------------------------------------------------
    async def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: List[ReviewComment],
    ) -> dict:
        payload = {
            "event": REVIEW_EVENT,
            "comments": [c.model_dump() for c in comments],
        }
        resp = await self._request(
            "POST", f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews", json=payload
        )
        return resp.json()
