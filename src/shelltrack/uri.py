"""URI value type for working directories reported by the shell.

Working directories arrive over the wire either as URI strings or as a
components mapping (``scheme``, ``authority``, ``path``, ``query``,
``fragment``). ``Uri.revive`` accepts both and compares by value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit


@dataclass(frozen=True, slots=True)
class Uri:
    """An immutable URI. Two Uri objects are equal when all components are."""

    scheme: str
    authority: str = ""
    path: str = ""
    query: str = ""
    fragment: str = ""

    @classmethod
    def parse(cls, value: str) -> Uri:
        """Parse a URI string such as ``file:///home/me``."""
        parts = urlsplit(value)
        return cls(
            scheme=parts.scheme,
            authority=parts.netloc,
            path=unquote(parts.path),
            query=parts.query,
            fragment=parts.fragment,
        )

    @classmethod
    def file(cls, path: str) -> Uri:
        """Build a ``file`` URI from a local filesystem path."""
        if PureWindowsPath(path).drive:
            posix = "/" + PureWindowsPath(path).as_posix()
        else:
            posix = PurePosixPath(path).as_posix()
            if not posix.startswith("/"):
                posix = "/" + posix
        return cls(scheme="file", path=posix)

    @classmethod
    def revive(cls, data: Uri | Mapping[str, Any] | str | None) -> Uri | None:
        """Turn a wire value back into a Uri.

        Returns None for None, so an absent cwd stays absent.
        """
        if data is None or isinstance(data, Uri):
            return data
        if isinstance(data, str):
            return cls.parse(data)
        return cls(
            scheme=str(data.get("scheme") or ""),
            authority=str(data.get("authority") or ""),
            path=str(data.get("path") or ""),
            query=str(data.get("query") or ""),
            fragment=str(data.get("fragment") or ""),
        )

    def __str__(self) -> str:
        return urlunsplit(
            (self.scheme, self.authority, quote(self.path, safe="/:"), self.query, self.fragment)
        )
