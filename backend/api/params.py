"""
Request param models for the review ingestion endpoints.

Key features:
- frozen=True: Immutable after validation
- populate_by_name=True: Accept both alias and field name (maxCount / max_count)
- extra='ignore': Ignore undeclared fields
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseParamsModel(BaseModel):
    """Base model for all API param schemas."""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra='ignore',
    )


class FetchReviewParams(BaseParamsModel):
    """POST /api/reviews/fetch"""
    link: str = Field(pattern=r'^https?://\S+$')
    ignore_cache: bool = Field(default=False, validation_alias='ignoreCache')


class FetchReviewsParams(BaseParamsModel):
    """POST /api/reviews/fetch-all"""
    delay: float = Field(default=0, ge=0, description="Seconds between two chronicles")
    max_count: Optional[int] = Field(default=None, ge=0, validation_alias='maxCount')
    update: bool = False
    ignore_cache: bool = Field(default=False, validation_alias='ignoreCache')
