# procfile.py
"""
Reads and writes Procfiles.

A valid Procfile entry is captured by this regex:

    ^([A-Za-z0-9_-]+):\\s*(.+)$

All other lines (comments, blank lines, malformed entries) are ignored.
Entries keep insertion order: the order lines appear in the source, or the
order they were added with `set()`.
"""
from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from . import settings
from .model import NAME_PATTERN, CommandDefinition, is_valid_name
from .ui.console import get_console


ENTRY_RE = re.compile(rf"^({NAME_PATTERN}):\s*(.+)$")


def parse_line(line: str) -> Optional[CommandDefinition]:
    """Return the entry on `line`, or None if the line is not an entry."""
    m = ENTRY_RE.match(line)
    if m is None:
        return None
    name, command = m.group(1), m.group(2)
    # "web: " matches with a lone space as the command; not a usable entry
    if not command.strip():
        return None
    return CommandDefinition(name=name, command=command, line=line)


class ProcessList:
    """An ordered set of named commands, loaded from and saved to a Procfile."""

    def __init__(
        self,
        entries: Optional[Dict[str, CommandDefinition]] = None,
        source_path: str | Path | None = None,
    ):
        self.entries: Dict[str, CommandDefinition] = dict(entries or {})
        self.source_path: Optional[Path] = Path(source_path) if source_path is not None else None

    # ------------------------------------------------------------------
    # Parsing / serialization
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, source_path: str | Path | None = None) -> ProcessList:
        plist = cls(source_path=source_path)
        plist._parse_into(text)
        return plist

    def _parse_into(self, text: str) -> None:
        for line in text.replace("\r\n", "\n").split("\n"):
            entry = parse_line(line)
            if entry is not None:
                # later duplicates win, position of the first one is kept
                self.entries[entry.name] = entry

    def to_text(self) -> str:
        return "\n".join(str(e) for e in self.entries.values())

    def __str__(self) -> str:
        return self.to_text()

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> ProcessList:
        """
        Load a Procfile from disk.

        Raises:
            OSError: file missing or unreadable
            UnicodeDecodeError: file is not valid text in settings.ENCODING
        """
        p = Path(path)
        text = p.read_text(encoding=settings.ENCODING)
        plist = cls.parse(text, source_path=p)
        get_console().print_debug(f"loaded {len(plist)} entries from {p}")
        return plist

    def reload(self) -> None:
        """
        Re-read `source_path`, replacing every entry.

        Raises the same errors as `load()`; entries are untouched on failure.
        """
        if self.source_path is None:
            raise ValueError("ProcessList has no source_path to reload from")
        text = self.source_path.read_text(encoding=settings.ENCODING)
        self.entries.clear()
        self._parse_into(text)

    def save(self, path: str | Path | None = None) -> Path:
        """
        Write the Procfile to `path` (or `source_path`).

        The text is written to a temp file in the destination directory,
        then renamed over the destination, so readers never observe a
        partially written file. An existing destination keeps its permission
        bits; a new one gets the usual umask defaults.

        The temp file is always `.<name>.tmp` next to the destination, so
        concurrent saves of the same file must be serialized by the caller.

        Returns:
            The path written to, which also becomes the new `source_path`.
        """
        if path is not None:
            out = Path(path)
        elif self.source_path is not None:
            out = self.source_path
        else:
            raise ValueError("No path given and ProcessList has no source_path")

        data = self.to_text().encode(settings.ENCODING)
        tmp = out.with_name(f".{out.name}.tmp")
        try:
            # Write tmp, then atomic rename
            with tmp.open("wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if out.exists():
                shutil.copymode(out, tmp)
            tmp.replace(out)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)

        self.source_path = out
        get_console().print_debug(f"saved {len(self)} entries to {out}")
        return out

    # ------------------------------------------------------------------
    # Lookup / mutation
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Optional[CommandDefinition]:
        return self.entries.get(name)

    def delete(self, name: str) -> bool:
        return self.entries.pop(name, None) is not None

    def set(self, name: str, command: str) -> CommandDefinition:
        """Add or replace an entry. A replaced entry keeps its position."""
        if not is_valid_name(name):
            raise ValueError(f"Invalid entry name: {name!r}")
        if not command or not command.strip():
            raise ValueError(f"Entry {name!r} must have a command")
        entry = CommandDefinition(name=name, command=command, line=f"{name}: {command}")
        self.entries[name] = entry
        return entry

    def names(self) -> List[str]:
        return list(self.entries)

    def __getitem__(self, name: str) -> CommandDefinition:
        return self.entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[CommandDefinition]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)
