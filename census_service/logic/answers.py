"""Normalization of stored questionnaire answers.

Stored answers arrive either pre-parsed (a mapping) or as raw JSON text.
Every value is normalized once into a small tagged union so the resolver and
the document builder never inspect raw shapes:

- `Scalar` for single-valued questions
- `Multi` for multi-select questions (order preserved)
- `MISSING` for absent, null or empty values
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

from census_service.logic.errors import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass(frozen=True)
class Multi:
    values: tuple[str, ...]


class _Missing:
    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

AnswerValue = Union[Scalar, Multi, _Missing]


def _decode_answers_text(raw: str | bytes) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ParseError(f"answers are not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("answers nest too deeply to decode") from exc


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_value(value: Any) -> AnswerValue:
    """Return the tagged form of one raw answer value."""
    if value is None:
        return MISSING
    if isinstance(value, (list, tuple)):
        return Multi(tuple(_as_text(v) for v in value if v is not None))
    text = _as_text(value)
    if text == "":
        return MISSING
    return Scalar(text)


def load_answers(raw: Any) -> dict[str, Any]:
    """Return stored answers as a plain JSON-compatible mapping.

    Never raises: undecodable text, non-object JSON and unsupported types all
    yield an empty mapping.
    """
    if raw is None:
        return {}
    data: Any = raw
    if isinstance(raw, (str, bytes, bytearray)):
        if not raw.strip():
            return {}
        try:
            data = _decode_answers_text(raw)
        except ParseError as exc:
            logger.debug("answers.parse_failed reason=%s", exc.message)
            return {}
    if not isinstance(data, Mapping):
        logger.debug("answers.not_a_mapping type=%s", type(data).__name__)
        return {}
    return {str(k): v for k, v in data.items()}


def parse_answers(raw: Any) -> dict[str, AnswerValue]:
    """Normalize stored answers into `{key: Scalar | Multi | MISSING}`."""
    return {k: normalize_value(v) for k, v in load_answers(raw).items()}


def answer_value(answers: Mapping[str, AnswerValue] | str | bytes | None, key: str) -> AnswerValue:
    if not isinstance(answers, Mapping):
        # Stored JSON text or anything undecodable
        answers = parse_answers(answers)
    value = answers.get(key, MISSING)
    if isinstance(value, (Scalar, Multi, _Missing)):
        return value
    # Raw mappings may reach here from callers that skipped parse_answers
    return normalize_value(value)


def text_answer(answers: Mapping[str, AnswerValue], key: str, default: str = "") -> str:
    """Return a free-text answer, or `default` when it is missing or multi-valued."""
    value = answer_value(answers, key)
    if isinstance(value, Scalar):
        return value.value
    return default


def serialize_answers(answers: Any) -> str:
    """Return answers as JSON text for storage; text payloads pass through verbatim."""
    if isinstance(answers, str):
        return answers
    return json.dumps(answers if answers is not None else {}, ensure_ascii=False)


__all__ = [
    "Scalar",
    "Multi",
    "MISSING",
    "AnswerValue",
    "normalize_value",
    "load_answers",
    "parse_answers",
    "answer_value",
    "text_answer",
    "serialize_answers",
]
