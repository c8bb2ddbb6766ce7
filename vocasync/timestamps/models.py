"""Common data models for word-level alignment results.

This module defines pydantic models shared by the API client, the
synchronization cache and the word alignment matcher.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

__all__ = [
    "AlignedWord",
    "AlignmentTrack",
]


class AlignedWord(BaseModel):
    """Represents a single spoken word with timing information."""

    word: str = Field(..., description="The spoken word as returned by the aligner.")
    start: float = Field(..., ge=0.0, description="Start time of the word in seconds.")
    end: float = Field(..., ge=0.0, description="End time of the word in seconds.")

    @model_validator(mode="after")
    def _check_order(self) -> AlignedWord:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) precedes start ({self.start})")
        return self


class AlignmentTrack(BaseModel):
    """Ordered timestamped word list for one document, in spoken order."""

    words: list[AlignedWord] = Field(default_factory=list, description="Spoken words.")
    duration: float = Field(0.0, ge=0.0, description="Total audio duration in seconds.")
