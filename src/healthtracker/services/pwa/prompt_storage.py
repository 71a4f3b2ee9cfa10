"""
Install-Prompt Storage

Key/value storage used by the install-prompt controller. Mirrors the
browser localStorage contract (string values, None for missing keys)
so the controller can run against a real client store or in memory.
"""

from typing import Optional, Protocol


class PromptStorage(Protocol):
    """localStorage-shaped storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemoryPromptStorage:
    """Dict-backed PromptStorage."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)
