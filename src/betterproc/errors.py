# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


class BetterProcError(Exception):
    """Base class for every error raised by betterproc."""


@dataclass(eq=False)
class PathResolutionError(BetterProcError):
    """The working directory does not exist or cannot be canonicalized."""
    path: str
    reason: str

    def __str__(self) -> str:
        return f"PathResolutionError: {self.reason}\npath={self.path}"


@dataclass(eq=False)
class ExecutionError(BetterProcError):
    """
    Structured execution error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    command: str
    reason: str
    exit_code: Optional[int] = None
    details: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"ExecutionError: {self.reason}", f"command={self.command}"]
        if self.exit_code is not None:
            lines.append(f"exit_code={self.exit_code}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)
