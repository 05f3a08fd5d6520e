"""Pydantic models for stored survey responses and the responses API."""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from census_service.logic.answers import load_answers


def _as_optional_text(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


class ResponseSummary(BaseModel):
    id: int
    ext_id: Optional[str] = None
    ts: Optional[str] = None
    created: Optional[str] = None

    @field_validator("ext_id", "ts", "created", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _as_optional_text(v)


class ResponseRecord(ResponseSummary):
    """One persisted survey submission.

    `answers` accepts either a mapping or the raw stored JSON text; text that
    does not decode to an object becomes an empty mapping.
    """

    answers: dict[str, Any] = Field(default_factory=dict)

    @field_validator("answers", mode="before")
    @classmethod
    def decode_answers(cls, v: Any) -> dict[str, Any]:
        return load_answers(v)

    def date_label(self) -> str:
        """First ten characters of `ts`, falling back to `created`, else empty."""
        return (self.ts or self.created or "")[:10]


class ResponseList(BaseModel):
    total: int
    items: List[dict]


class Submission(BaseModel):
    """POST /responses body; `id` is the client's own identifier."""

    id: Optional[Union[str, int]] = None
    ts: Optional[str] = None
    answers: Optional[Union[dict[str, Any], str]] = None


class SubmissionResult(BaseModel):
    ok: bool
    db_id: Optional[int] = None


__all__ = [
    "ResponseSummary",
    "ResponseRecord",
    "ResponseList",
    "Submission",
    "SubmissionResult",
]
