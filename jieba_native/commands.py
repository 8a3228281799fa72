"""Reply rendering for the ``jieba`` chat command.

Argument parsing belongs to the host; this module only turns an already
parsed request into the reply text.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol

from jieba_native.models import Keyword

NO_MESSAGE = "Please provide a sentence to segment."
INVALID_ACTION = "Unknown action. Use 0 (cut), 1 (full cut) or 2 (keyword extraction)."
DEFAULT_NUMBER = 3


class Action(IntEnum):
    CUT = 0
    CUT_ALL = 1
    EXTRACT = 2


class SupportsSegmentation(Protocol):
    def cut(self, text: str, hmm: bool | None = None) -> list[str]: ...

    def cut_all(self, text: str) -> list[str]: ...

    def extract(self, text: str, top_n: int, allowed_pos: list[str] | None = None) -> list[Keyword]: ...


def render_reply(
    service: SupportsSegmentation,
    message: str | None,
    action: int = Action.CUT,
    number: int = DEFAULT_NUMBER,
) -> str:
    """Build the reply for one command invocation."""
    if not message:
        return NO_MESSAGE
    if action == Action.CUT:
        return ", ".join(service.cut(message))
    if action == Action.CUT_ALL:
        return ", ".join(service.cut_all(message))
    if action == Action.EXTRACT:
        keywords = service.extract(message, number, None)
        return "\n".join(f"{k.keyword}: {k.weight}" for k in keywords)
    return INVALID_ACTION
