"""Checkbox state resolution for rendered questionnaire options.

An option is ticked when the stored answer equals its label, or equals the
label's leading numeric code. Codes are the leading run of digits and dots
ending in a period (`"4.2."` for `"4.2. Tak, poza gminą obecnego pobytu"`);
the stored value may omit the trailing period. Labels without a numeric code
match by exact comparison only. Comparisons ignore case and surrounding
whitespace. Both helpers are pure and never raise.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Mapping, NamedTuple

from census_service.logic.answers import Multi, Scalar, answer_value

_LABEL_CODE_RE = re.compile(r"^\d+(?:\.\d+)*\.")

YES = "TAK"
NO = "NIE"


class Glyph(str, enum.Enum):
    CHECKED = "\u2612"  # ☒
    UNCHECKED = "\u2610"  # ☐

    def __str__(self) -> str:
        return self.value


class YesNo(NamedTuple):
    yes: Glyph
    no: Glyph


def _norm(text: str) -> str:
    return text.strip().lower()


def label_code(option_label: str) -> str | None:
    """Return the normalized numeric code of `option_label`, e.g. "4.2.", or None."""
    m = _LABEL_CODE_RE.match(_norm(option_label))
    return m.group(0) if m else None


def _matches(stored: str, label: str, code: str | None) -> bool:
    value = _norm(stored)
    if value == label:
        return True
    if code is None or not value:
        return False
    return value == code or value == code[:-1]


def resolve(answers: Mapping[str, Any], key: str, option_label: str) -> Glyph:
    """Return the glyph for `option_label` of question `key`."""
    value = answer_value(answers, key)
    label = _norm(option_label)
    code = label_code(option_label)
    if isinstance(value, Scalar):
        hit = _matches(value.value, label, code)
    elif isinstance(value, Multi):
        hit = any(_matches(v, label, code) for v in value.values)
    else:
        hit = False
    return Glyph.CHECKED if hit else Glyph.UNCHECKED


def is_yes(answers: Mapping[str, Any], key: str) -> bool:
    value = answer_value(answers, key)
    return isinstance(value, Scalar) and value.value == YES


def yes_no(answers: Mapping[str, Any], key: str) -> YesNo:
    """Resolve a TAK/NIE question; anything else leaves both boxes empty."""
    value = answer_value(answers, key)
    raw = value.value if isinstance(value, Scalar) else None
    return YesNo(
        yes=Glyph.CHECKED if raw == YES else Glyph.UNCHECKED,
        no=Glyph.CHECKED if raw == NO else Glyph.UNCHECKED,
    )


__all__ = ["Glyph", "YesNo", "YES", "NO", "label_code", "resolve", "is_yes", "yes_no"]
