from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from gopherlint.invariants import never


T = TypeVar("T")


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
) -> list[T]:
    """Return ``values`` in a stable, deterministic order.

    ``source`` names the call site when the values cannot be compared.
    """
    items = list(values)
    try:
        return sorted(items, key=key)
    except TypeError as exc:
        never("values are not orderable", source=source, error=str(exc))
