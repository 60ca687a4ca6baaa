"""Invariant markers."""

from __future__ import annotations

from typing import NoReturn

from gopherlint.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    if env:
        details = ", ".join(f"{key}={value!r}" for key, value in sorted(env.items()))
        raise NeverThrown(f"{reason} ({details})")
    raise NeverThrown(reason)
