# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Ordered key-value store for solver diagnostics.

Solvers return one of these from `init` and `next_iter` (current temperature,
acceptance flags, counters); the executor forwards it to the observers, which
usually end up passing it as `extra` to the JSON logger.
"""

from typing import Any, Iterator


class KV:
    """Insertion-ordered mapping of diagnostic names to values."""

    __slots__ = ("_entries",)

    def __init__(self, **entries: Any) -> None:
        self._entries: dict[str, Any] = dict(entries)

    def push(self, key: str, value: Any) -> "KV":
        """Add or overwrite an entry. Returns self for chaining."""
        self._entries[key] = value
        return self

    def merge(self, other: "KV") -> "KV":
        """Return a new KV with `other`'s entries applied on top of this one's."""
        merged = KV(**self._entries)
        for key, value in other.items():
            merged.push(key, value)
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._entries.items())

    def as_dict(self) -> dict[str, Any]:
        return dict(self._entries)

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KV):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._entries.items())
        return f"KV({inner})"


def make_kv(**entries: Any) -> KV:
    """Shorthand for `KV(**entries)`."""
    return KV(**entries)
