import logging
from functools import lru_cache

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from agents.llm_client import GeminiClient
from agents.retry import QuotaExceededError, RetryPolicy
from config import ConfigError, Settings, configure_logging
from diff_parser import parse_unified_diff
from models import PRDetails, ReviewResponse
from reviewer import analyze_code
from utils.github_client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return settings


@lru_cache
def _gemini_client() -> GeminiClient:
    return GeminiClient.from_settings(get_settings())


def get_llm() -> GeminiClient:
    try:
        return _gemini_client()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_retry_policy(settings: Settings = Depends(get_settings)) -> RetryPolicy:
    return RetryPolicy.from_settings(settings)


def get_github(settings: Settings = Depends(get_settings)) -> GitHubClient:
    return GitHubClient.from_settings(settings)


app = FastAPI(title="PR Review Agent (Gemini, inline comments)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuotaExceededError)
async def quota_exceeded_handler(request, exc: QuotaExceededError):
    logger.error("Review aborted: %s", exc.message)
    return JSONResponse(status_code=429, content={"detail": exc.message})


@app.exception_handler(GitHubError)
async def github_error_handler(request, exc: GitHubError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


class PRInput(BaseModel):
    owner: str
    repo: str
    pr_number: int


async def review_diff_for_pr(
    diff_text: str,
    pr_details: PRDetails,
    llm: GeminiClient,
    retry_policy: RetryPolicy,
) -> ReviewResponse:
    files = parse_unified_diff(diff_text)
    if not files:
        raise HTTPException(status_code=400, detail="No files parsed from diff")
    comments = await analyze_code(files, pr_details, llm, retry_policy)
    return ReviewResponse(
        review_summary=f"{len(comments)} comments generated", comments=comments
    )


async def review_pr_inline(
    inp: PRInput,
    llm: GeminiClient,
    retry_policy: RetryPolicy,
    github: GitHubClient,
) -> ReviewResponse:
    pr_details = await github.fetch_pr_details(inp.owner, inp.repo, inp.pr_number)
    diff_text = await github.fetch_pr_diff(inp.owner, inp.repo, inp.pr_number)
    if not diff_text.strip():
        raise HTTPException(status_code=400, detail="No diff found")
    return await review_diff_for_pr(diff_text, pr_details, llm, retry_policy)


@app.post("/review-diff", response_model=ReviewResponse, summary="Review a unified diff (plain text)")
async def review_diff(
    diff_text: str = Body(..., media_type="text/plain", description="Paste the full unified diff here (plain text)."),
    llm: GeminiClient = Depends(get_llm),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
):
    if not diff_text.strip():
        raise HTTPException(status_code=400, detail="No diff found")
    pr_details = PRDetails(owner="", repo="", pull_number=0)
    return await review_diff_for_pr(diff_text, pr_details, llm, retry_policy)


@app.post("/review-pr", response_model=ReviewResponse, summary="Review a GitHub PR without posting")
async def review_pr(
    inp: PRInput,
    llm: GeminiClient = Depends(get_llm),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    github: GitHubClient = Depends(get_github),
):
    return await review_pr_inline(inp, llm, retry_policy, github)


@app.post("/review-pr-and-post", summary="Review a GitHub PR and post one inline review")
async def review_pr_and_post(
    inp: PRInput,
    llm: GeminiClient = Depends(get_llm),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    github: GitHubClient = Depends(get_github),
):
    review = await review_pr_inline(inp, llm, retry_policy, github)
    if not review.comments:
        return {"review": review, "posted": False}

    res = await github.create_review(inp.owner, inp.repo, inp.pr_number, review.comments)
    logger.info("Posted review with %d comments to %s/%s#%d",
                len(review.comments), inp.owner, inp.repo, inp.pr_number)
    return {
        "review": review,
        "posted": True,
        "review_id": res.get("id"),
        "html_url": res.get("html_url"),
    }


@app.get("/")
def root(github: GitHubClient = Depends(get_github)):
    return {"status": "PR Review Agent running", "git_integration": github.token_available}
