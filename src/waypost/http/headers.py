"""Case-insensitive request headers.

A read-only ``Mapping[str, str]`` over the header pairs of one request.
Names are lower-cased once, at construction; lookups return the first
value sent under a name and ``get_list()`` returns all of them.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only, case-insensitive header mapping.

    Built from the raw ASGI byte pairs::

        Headers([(b"content-type", b"application/json")])["Content-Type"]
    """

    __slots__ = ("_pairs",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        """Build from already-decoded ``{name: value}`` pairs."""
        return cls(
            (name.encode("latin-1"), value.encode("latin-1")) for name, value in headers.items()
        )

    def __getitem__(self, key: str) -> str:
        wanted = key.lower()
        for name, value in self._pairs:
            if name == wanted:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(name == key.lower() for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent under *key*, in order."""
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Header pairs re-encoded for ASGI."""
        return tuple(
            (name.encode("latin-1"), value.encode("latin-1")) for name, value in self._pairs
        )
