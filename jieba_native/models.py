"""Result records returned by the segmentation API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item[name]
    return getattr(item, name)


@dataclass(frozen=True)
class TaggedWord:
    word: str
    tag: str

    @classmethod
    def from_native(cls, item: Any) -> TaggedWord:
        return cls(word=str(_field(item, "word")), tag=str(_field(item, "tag")))


@dataclass(frozen=True)
class Keyword:
    keyword: str
    weight: float

    @classmethod
    def from_native(cls, item: Any) -> Keyword:
        return cls(keyword=str(_field(item, "keyword")), weight=float(_field(item, "weight")))
