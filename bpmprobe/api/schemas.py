"""Pydantic request/response models for API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DetectBpmRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_url: str | None = Field(default=None, alias="audioUrl")


class TempoResponse(BaseModel):
    bpm: int
    duration: float
    confidence: Literal["low", "estimated"]


class ErrorResponse(BaseModel):
    error: str
