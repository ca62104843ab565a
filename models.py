from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    ADDED = "add"
    REMOVED = "del"
    CONTEXT = "normal"


class DiffChange(BaseModel):
    """One line of a hunk body."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    content: str
    old_line: Optional[int] = None
    new_line: Optional[int] = None

    @property
    def display_line(self) -> Optional[int]:
        # added and context lines are shown with their new-file number
        if self.new_line is not None:
            return self.new_line
        return self.old_line


class DiffChunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    changes: List[DiffChange] = Field(default_factory=list)


class DiffFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    # None when the file was deleted
    path: Optional[str] = None
    chunks: List[DiffChunk] = Field(default_factory=list)


LinePositionMap = Dict[int, int]


class PRDetails(BaseModel):
    owner: str
    repo: str
    pull_number: int
    title: str = ""
    description: str = ""


class ReviewSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    line_number: Optional[Union[int, float, str]] = Field(default=None, alias="lineNumber")
    review_comment: str = Field(alias="reviewComment")


class AIReviewResponse(BaseModel):
    reviews: List[ReviewSuggestion]


class ReviewComment(BaseModel):
    path: str
    position: int
    body: str


class ReviewResponse(BaseModel):
    review_summary: str
    comments: List[ReviewComment]
