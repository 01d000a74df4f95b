from typing import Any

from pydantic import BaseModel, Field


class SurveyResultCreateModel(BaseModel):
    """Schema for a completed survey submission (API Input)."""

    survey_name: str = Field(..., max_length=100)
    survey_language: str = Field(..., max_length=10)
    # Stored as-is; never validated against the originating survey schema.
    survey_data: Any = Field(..., description="Answers produced by the survey widget.")


class MessageResponseModel(BaseModel):
    message: str
