"""Filesystem containment checks."""

from __future__ import annotations

from pathlib import Path


class PathEscapeError(ValueError):
    """Raised when a path resolves outside its allowed root."""

    def __init__(self, path: Path, root: Path) -> None:
        super().__init__(f"{path} is outside {root}")
        self.path = path
        self.root = root


class InvalidLocationError(ValueError):
    """Raised when a location cannot be turned into a filesystem path at all."""

    def __init__(self, location: str | Path, reason: str) -> None:
        super().__init__(f"invalid location {location!r}: {reason}")
        self.location = location
        self.reason = reason


def resolve_within(root: Path, location: str | Path) -> Path:
    """Resolve ``location`` against ``root`` and require it to stay inside.

    Relative locations are joined onto ``root``; absolute ones are taken as
    given. ``~`` is not expanded in ``location``. Symlinks and ``..`` segments
    are resolved before the check.
    """
    base = root.expanduser().resolve()
    try:
        candidate = Path(location)
        if not candidate.is_absolute():
            candidate = base / candidate
        resolved = candidate.resolve()
    except (ValueError, OSError, RuntimeError) as exc:
        raise InvalidLocationError(location, str(exc)) from exc
    if not resolved.is_relative_to(base):
        raise PathEscapeError(resolved, base)
    return resolved


__all__ = ["InvalidLocationError", "PathEscapeError", "resolve_within"]
