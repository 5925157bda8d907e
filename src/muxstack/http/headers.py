"""Case-insensitive HTTP header containers.

``Headers`` wraps the raw byte pairs from an ASGI scope and is read-only.
``MutableHeaders`` is what a ``ResponseWriter`` exposes to handlers; it
keeps insertion order and allows repeated names (``Set-Cookie``).
"""

from collections.abc import Iterable, Iterator, Mapping


def _fold(name: str) -> str:
    return name.lower()


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    ``headers["X"]`` returns the first value, ``get_list("X")`` all of them.
    """

    __slots__ = ("_items",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._items: tuple[tuple[str, str], ...] = tuple(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )

    def __getitem__(self, key: str) -> str:
        folded = _fold(key)
        for name, value in self._items:
            if name == folded:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(name == _fold(key) for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._items))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._items))

    def __repr__(self) -> str:
        return f"Headers({list(self._items)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key*, in order."""
        folded = _fold(key)
        return [value for name, value in self._items if name == folded]


class MutableHeaders:
    """Response headers a handler or middleware can edit before the flush."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._items: list[tuple[str, str]] = list(items)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(_fold(name) == _fold(key) for name, _ in self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"MutableHeaders({self._items!r})"

    def get(self, key: str, default: str | None = None) -> str | None:
        folded = _fold(key)
        for name, value in self._items:
            if _fold(name) == folded:
                return value
        return default

    def get_list(self, key: str) -> list[str]:
        folded = _fold(key)
        return [value for name, value in self._items if _fold(name) == folded]

    def set(self, key: str, value: str) -> None:
        """Replace every value of *key* with a single *value*."""
        self.delete(key)
        self._items.append((key, value))

    def setdefault(self, key: str, value: str) -> str:
        existing = self.get(key)
        if existing is not None:
            return existing
        self._items.append((key, value))
        return value

    def add(self, key: str, value: str) -> None:
        """Append *value* without touching existing values of *key*."""
        self._items.append((key, value))

    def delete(self, key: str) -> None:
        folded = _fold(key)
        self._items = [(name, value) for name, value in self._items if _fold(name) != folded]

    def raw(self) -> list[tuple[bytes, bytes]]:
        """Encode as ASGI header pairs (lower-cased names)."""
        return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in self._items]
