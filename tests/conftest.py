from typing import Any, Dict, List, Tuple

import pytest

from archive_mcp import timeutil

FIXED_NOW_MS = 1_700_000_000_000


class _Operation:
    def __init__(self, root: "FakeArchive", path: Tuple[str, ...]) -> None:
        self._root = root
        self._path = path

    def __getattr__(self, name: str) -> "_Operation":
        return _Operation(self._root, self._path + (name,))

    async def __call__(self, *args: Any) -> Any:
        dotted = ".".join(self._path)
        self._root.calls.append((dotted, args))
        result = self._root.results.get(dotted, [])
        if isinstance(result, BaseException):
            raise result
        return result


class FakeArchive:
    """Stands in for ArchiveClient: records every call by dotted operation path."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.results: Dict[str, Any] = {}
        self.closed = False

    def respond(self, operation: str, result: Any) -> None:
        self.results[operation] = result

    def __getattr__(self, name: str) -> _Operation:
        return _Operation(self, (name,))

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_archive() -> FakeArchive:
    return FakeArchive()


@pytest.fixture
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> int:
    monkeypatch.setattr(timeutil, "now_ms", lambda: FIXED_NOW_MS)
    return FIXED_NOW_MS
