# model.py
from __future__ import annotations

import re
from dataclasses import dataclass


NAME_PATTERN = r"[A-Za-z0-9_-]+"
_NAME_RE = re.compile(NAME_PATTERN)


def is_valid_name(name: str) -> bool:
    return _NAME_RE.fullmatch(name) is not None


@dataclass(frozen=True)
class CommandDefinition:
    """A single named command (entry) from a Procfile."""
    name: str
    command: str
    line: str = ""  # original source line, empty when built in code

    def __str__(self) -> str:
        return f"{self.name}: {self.command}"
