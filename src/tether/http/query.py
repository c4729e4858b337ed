"""Immutable query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Parsed query string.

    ``query["page"]`` returns the first value for a key; ``get_list``
    returns all of them. Blank values are kept.
    """

    __slots__ = ("_data",)

    def __init__(self, query_string: bytes = b"") -> None:
        data: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string.decode("latin-1"), keep_blank_values=True):
            data.setdefault(key, []).append(value)
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        first = {k: v[0] for k, v in self._data.items()}
        return f"QueryParams({first!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, ()))

