"""Read-only query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Parsed query string.

    ``params["k"]`` returns the first value, ``get_list("k")`` all values.
    Blank values are kept (``?flag=`` gives ``{"flag": ""}``).
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        raw = query_string.decode("latin-1") if isinstance(query_string, bytes) else query_string
        self._raw = raw
        self._pairs: tuple[tuple[str, str], ...] = tuple(parse_qsl(raw, keep_blank_values=True))

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    @property
    def raw(self) -> str:
        return self._raw

    def get_list(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]
