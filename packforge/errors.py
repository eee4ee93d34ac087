from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PackError(Exception):
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - formatting
        loc = f" ({self.path})" if self.path else ""
        return f"{self.message}{loc}"


@dataclass
class StructuralParseError(PackError):
    """A document inside a package could not be parsed."""


@dataclass
class PackIOError(PackError):
    """The archive itself could not be opened, read or written."""


@dataclass
class UnresolvedReference:
    """A cross-reference that matched nothing; ``guess`` is kept anyway."""
    reference: str
    guess: str
    context: Optional[str] = None


@dataclass
class Diagnostic:
    kind: str           # parse_error / unresolved / geometry / io
    path: str
    message: str


class Diagnostics:
    """
    诊断信息收集器

    Import and merge record every non-fatal problem here instead of aborting.
    Safe to share between the worker threads of one import.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []
        self._lock = threading.Lock()

    def add(self, kind: str, path: str, message: str) -> Diagnostic:
        diag = Diagnostic(kind=kind, path=path, message=message)
        with self._lock:
            self._items.append(diag)
        logger.warning(f"[{kind}] {path}: {message}")
        return diag

    def parse_error(self, error: StructuralParseError) -> Diagnostic:
        return self.add("parse_error", error.path or "", error.message)

    def unresolved(self, ref: UnresolvedReference) -> Diagnostic:
        where = ref.context or ref.reference
        return self.add("unresolved", where, f"reference '{ref.reference}' not found, kept as '{ref.guess}'")

    def by_kind(self) -> Dict[str, List[Diagnostic]]:
        out: Dict[str, List[Diagnostic]] = {}
        for d in self:
            out.setdefault(d.kind, []).append(d)
        return out

    def warnings(self) -> List[str]:
        return [f"{d.path}: {d.message}" for d in self]

    def __iter__(self):
        with self._lock:
            items = list(self._items)
        return iter(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
