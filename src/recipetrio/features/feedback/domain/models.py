from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

FutureInterest = Literal["interested", "notInterested", "requestChange"]


class FeedbackInput(BaseModel):
    recipe_id: str = Field(min_length=1)
    reasons: List[str] = Field(min_length=1)
    comment: Optional[str] = Field(default=None, max_length=1000)
    future_interest: FutureInterest
    rating: Optional[int] = Field(default=None, ge=1, le=5)

    @field_validator("reasons")
    @classmethod
    def _reasons_not_blank(cls, v: List[str]) -> List[str]:
        if any(not r.strip() for r in v):
            raise ValueError("reasons must not contain blank entries")
        return v
