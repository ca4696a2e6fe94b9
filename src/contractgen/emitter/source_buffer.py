"""In-memory Python module with idempotent merging.

Page-level files (remote data source, repositories, mapper) and the
endpoints aggregator collect declarations from several endpoints over many
runs. :class:`SourceBuffer` merges new declarations into the existing text
so that re-running generation never duplicates anything:

* import lines are merged by module (``from core import Left`` joins an
  existing ``from core import Either``);
* module-level functions are matched by name;
* class members are matched by name within their class.

A declaration whose text is already contained in the buffer is a no-op. A
declaration with the same name but different text replaces the old one.
Everything else is appended.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from contractgen.config import ProjectTree

_FROM_IMPORT_RE = re.compile(r"from\s+(\S+)\s+import\s+(.+)")
_MEMBER_RE = re.compile(r"    (?:async\s+)?def\s+(\w+)\s*\(")
_FUNCTION_RE = re.compile(r"(?:async\s+)?def\s+(\w+)\s*\(")

UNCHANGED = "unchanged"
REPLACED = "replaced"
ADDED = "added"


class SourceBuffer:
    """A Python module held as a list of lines.

    Args:
        text: Initial module text; empty for a new file.
    """

    def __init__(self, text: str = "") -> None:
        self._lines: list[str] = text.splitlines()

    @classmethod
    def read(cls, path: Path, tree: ProjectTree) -> SourceBuffer:
        """Load *path*, or start empty when it does not exist yet."""
        if not path.is_file():
            return cls()
        return cls(tree.read_text(path))

    @property
    def text(self) -> str:
        lines = list(self._lines)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""

    @property
    def is_empty(self) -> bool:
        return not any(line.strip() for line in self._lines)

    def __contains__(self, snippet: str) -> bool:
        return snippet.strip() in self.text

    # ------------------------------------------------------------------ #
    # Imports
    # ------------------------------------------------------------------ #

    def add_import(self, line: str) -> bool:
        """Add one import line; returns False when nothing changed."""
        line = line.strip()
        if line in self._lines:
            return False

        match = _FROM_IMPORT_RE.fullmatch(line)
        if match:
            module, names = match.group(1), _split_names(match.group(2))
            for i, existing in enumerate(self._lines):
                found = _FROM_IMPORT_RE.fullmatch(existing)
                if found and found.group(1) == module and "(" not in found.group(2):
                    current = _split_names(found.group(2))
                    missing = [n for n in names if n not in current]
                    if not missing:
                        return False
                    self._lines[i] = f"from {module} import {', '.join(current + missing)}"
                    return True

        position = self._import_insert_position()
        self._lines.insert(position, line)
        if position == 0 and len(self._lines) > 1 and self._lines[1].strip():
            self._lines.insert(1, "")
        return True

    def _import_insert_position(self) -> int:
        last = -1
        i = 0
        while i < len(self._lines):
            line = self._lines[i]
            if line.startswith(("import ", "from ")):
                if line.rstrip().endswith("("):
                    while i < len(self._lines) - 1 and not self._lines[i].startswith(")"):
                        i += 1
                last = i
            elif line.strip() and not line.startswith("#") and last >= 0:
                break
            i += 1
        return last + 1

    # ------------------------------------------------------------------ #
    # Module-level declarations
    # ------------------------------------------------------------------ #

    def add_block(self, text: str, before: Optional[str] = None) -> bool:
        """Add a module-level block unless its text is already present.

        Args:
            text: The block to add.
            before: Insert in front of the first line starting with this
                prefix instead of at the end of the module.
        """
        if text in self:
            return False
        block = text.strip("\n").splitlines()
        if before is not None:
            for i, line in enumerate(self._lines):
                if line.startswith(before):
                    self._lines[i:i] = block + ["", ""]
                    return True
        self._append(block)
        return True

    def upsert_function(self, name: str, text: str, before: Optional[str] = None) -> str:
        """Add or replace the module-level function *name*."""
        if text in self:
            return UNCHANGED
        span = self._function_span(name)
        block = text.strip("\n").splitlines()
        if span is None:
            self.add_block(text, before=before)
            return ADDED
        start, end = span
        self._lines[start:end] = block
        return REPLACED

    def _function_span(self, name: str) -> Optional[tuple[int, int]]:
        for i, line in enumerate(self._lines):
            match = _FUNCTION_RE.match(line)
            if match and match.group(1) == name:
                start = i
                while start > 0 and self._lines[start - 1].startswith("@"):
                    start -= 1
                return start, self._block_end(i + 1, indent="")
        return None

    # ------------------------------------------------------------------ #
    # Class members
    # ------------------------------------------------------------------ #

    def has_class(self, class_name: str) -> bool:
        return self._class_span(class_name) is not None

    def upsert_member(self, class_name: str, member_name: str, text: str) -> str:
        """Add or replace the method *member_name* of *class_name*.

        *text* is the member source indented by four spaces, decorators
        included.

        Raises:
            KeyError: If the module has no class named *class_name*.
        """
        span = self._class_span(class_name)
        if span is None:
            raise KeyError(class_name)
        start, end = span
        class_text = "\n".join(self._lines[start:end])
        if text.strip() in class_text:
            return UNCHANGED

        block = text.strip("\n").splitlines()
        members = self._member_spans(start, end)
        if member_name in members:
            m_start, m_end = members[member_name]
            self._lines[m_start:m_end] = block
            return REPLACED

        body = [line.strip() for line in self._lines[start + 1 : end] if line.strip()]
        if body == ["pass"] or body == ["..."]:
            self._lines[start + 1 : end] = block
        else:
            self._lines[end:end] = [""] + block
        return ADDED

    def _class_span(self, class_name: str) -> Optional[tuple[int, int]]:
        pattern = re.compile(rf"class\s+{re.escape(class_name)}\b")
        for i, line in enumerate(self._lines):
            if pattern.match(line):
                return i, self._block_end(i + 1, indent="")
        return None

    def _member_spans(self, start: int, end: int) -> dict[str, tuple[int, int]]:
        starts: list[tuple[int, str]] = []
        for i in range(start + 1, end):
            match = _MEMBER_RE.match(self._lines[i])
            if match:
                first = i
                while first > start + 1 and self._lines[first - 1].startswith("    @"):
                    first -= 1
                starts.append((first, match.group(1)))

        spans: dict[str, tuple[int, int]] = {}
        for n, (first, name) in enumerate(starts):
            stop = starts[n + 1][0] if n + 1 < len(starts) else end
            while stop > first and not self._lines[stop - 1].strip():
                stop -= 1
            spans.setdefault(name, (first, stop))
        return spans

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _block_end(self, index: int, indent: str) -> int:
        """End of the block whose body starts at *index*, trailing blanks excluded."""
        end = index
        for i in range(index, len(self._lines)):
            line = self._lines[i]
            if line.strip() and not line.startswith((indent + " ", indent + "\t", ")")):
                break
            end = i + 1
        while end > index and not self._lines[end - 1].strip():
            end -= 1
        return end

    def _append(self, block: list[str]) -> None:
        while self._lines and not self._lines[-1].strip():
            self._lines.pop()
        if self._lines:
            self._lines.extend(["", ""])
        self._lines.extend(block)


def _split_names(names: str) -> list[str]:
    return [n.strip() for n in names.split(",") if n.strip()]
