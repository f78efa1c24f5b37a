"""Host collaborators used by the runner.

The runner never talks to an editor directly. It asks an ``ActiveDocument``
for the script, a ``ConfigurationSource`` for options and a ``Picker`` for
user choices. The command line provides file-backed implementations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

from .models import InstallationOption

logger = logging.getLogger(__name__)


@runtime_checkable
class ActiveDocument(Protocol):
    """The document currently open in the host."""

    @property
    def file_name(self) -> str | None: ...

    @property
    def is_untitled(self) -> bool: ...

    @property
    def is_dirty(self) -> bool: ...

    def get_text(self) -> str: ...

    async def save(self) -> bool: ...


@runtime_checkable
class ConfigurationSource(Protocol):
    """Read and write access to runner options."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def update(self, key: str, value: Any) -> None: ...


@runtime_checkable
class Picker(Protocol):
    """Asks the user to pick one of several options."""

    def pick(
        self, options: Sequence[InstallationOption], placeholder: str
    ) -> InstallationOption | None: ...

    def choose_application(self, prompt: str) -> str | None: ...


class FileDocument:
    """A script file on disk, optionally with unsaved replacement text."""

    def __init__(self, path: str | Path, text: str | None = None) -> None:
        self.path = Path(path).expanduser().resolve()
        self._pending_text = text

    @property
    def file_name(self) -> str | None:
        return str(self.path)

    @property
    def is_untitled(self) -> bool:
        return False

    @property
    def is_dirty(self) -> bool:
        return self._pending_text is not None

    def get_text(self) -> str:
        if self._pending_text is not None:
            return self._pending_text
        return self.path.read_text(encoding="utf-8")

    async def save(self) -> bool:
        if self._pending_text is None:
            return True
        self.path.write_text(self._pending_text, encoding="utf-8")
        self._pending_text = None
        logger.debug("Saved %s", self.path)
        return True


class UntitledDocument:
    """Script text that has never been saved, e.g. piped through stdin."""

    def __init__(self, text: str) -> None:
        self._text = text

    @property
    def file_name(self) -> str | None:
        return None

    @property
    def is_untitled(self) -> bool:
        return True

    @property
    def is_dirty(self) -> bool:
        return bool(self._text)

    def get_text(self) -> str:
        return self._text

    async def save(self) -> bool:
        return False
