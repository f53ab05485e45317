"""Immutable, case-insensitive header map."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Sequence, Union

HeaderValue = Union[str, int, float, Sequence[Union[str, int, float]]]
HeaderInput = Union["Headers", Mapping[str, HeaderValue], Iterable[Sequence[Any]], None]


def _coerce_values(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


class Headers(Mapping[str, str]):
    """Ordered header names mapped to value lists.

    Lookups ignore case. As a mapping, each name resolves to its first value;
    use :meth:`get_list` for every value sent under that name.
    """

    __slots__ = ("_items",)

    def __init__(self, headers: HeaderInput = None) -> None:
        items: dict[str, tuple[str, tuple[str, ...]]] = {}
        for name, values in _iter_input(headers):
            key = name.lower()
            if key in items:
                original, existing = items[key]
                items[key] = (original, existing + values)
            else:
                items[key] = (name, values)
        self._items = items

    @classmethod
    def _from_items(cls, items: dict[str, tuple[str, tuple[str, ...]]]) -> "Headers":
        instance = cls.__new__(cls)
        instance._items = items
        return instance

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1][0]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return {k: v for k, (_, v) in self._items.items()} == {
                k: v for k, (_, v) in other._items.items()
            }
        if isinstance(other, Mapping):
            return self == Headers(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple((k, v) for k, (_, v) in self._items.items()))

    def __repr__(self) -> str:
        return f"Headers({self.multi_items()!r})"

    def get_list(self, name: str) -> list[str]:
        entry = self._items.get(name.lower())
        return list(entry[1]) if entry else []

    def multi_items(self) -> list[tuple[str, str]]:
        """Flatten to ``(name, value)`` pairs in wire order."""
        return [(original, value) for original, values in self._items.values() for value in values]

    def to_dict(self) -> dict[str, list[str]]:
        return {original: list(values) for original, values in self._items.values()}

    def merge(self, other: HeaderInput) -> "Headers":
        """Return a copy where every name in ``other`` replaces its value list.

        A name already present keeps its position and its first spelling.
        """
        items = dict(self._items)
        for key, (name, values) in Headers(other)._items.items():
            if key in items:
                name = items[key][0]
            items[key] = (name, values)
        return Headers._from_items(items)

    def set(self, name: str, value: HeaderValue) -> "Headers":
        return self.merge({name: value})

    def setdefault(self, name: str, value: HeaderValue) -> "Headers":
        if name in self:
            return self
        return self.set(name, value)

    def remove(self, name: str) -> "Headers":
        key = name.lower()
        if key not in self._items:
            return self
        items = dict(self._items)
        del items[key]
        return Headers._from_items(items)


def _iter_input(headers: HeaderInput) -> Iterator[tuple[str, tuple[str, ...]]]:
    if headers is None:
        return
    if isinstance(headers, Headers):
        for original, values in headers._items.values():
            yield original, values
        return
    if isinstance(headers, Mapping):
        pairs: Iterable[Any] = headers.items()
    else:
        pairs = headers
    for pair in pairs:
        name, value = pair
        yield str(name), _coerce_values(value)
