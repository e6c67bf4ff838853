"""Security primitives: identifier validation, ownership and permission checks."""

from __future__ import annotations

import json
import os
import re
import stat
import sys
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_SESSION_ID_PATTERN = re.compile(r"[a-z0-9]{6,32}")
_TEAM_ID_PATTERN = re.compile(r"[a-z0-9][a-z0-9_-]{0,31}")


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


class SecurityError(Exception):
    """Base class for security baseline violations."""


class InvalidSessionIDError(SecurityError, ValueError):
    """A session ID does not match ^[a-z0-9]{6,32}$."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"invalid session ID: must match ^[a-z0-9]{{6,32}}$: got {_quote(session_id)}"
        )
        self.session_id = session_id


class InvalidTeamIDError(SecurityError, ValueError):
    """A team label does not match ^[a-z0-9][a-z0-9_-]{0,31}$."""

    def __init__(self, team_id: str) -> None:
        super().__init__(
            "invalid team ID: must match ^[a-z0-9][a-z0-9_-]{0,31}$: "
            f"got {_quote(team_id)}"
        )
        self.team_id = team_id


class OwnershipMismatchError(SecurityError):
    """A file is not owned by the current user."""

    def __init__(self, path: str, file_uid: int, current_uid: int) -> None:
        super().__init__(
            "ownership mismatch: file not owned by current user: "
            f"path={_quote(path)} file_uid={file_uid} current_uid={current_uid}"
        )
        self.path = path
        self.file_uid = file_uid
        self.current_uid = current_uid


def validate_session_id(session_id: str) -> str:
    """Return session_id if it is safe to use as a path component, else raise."""
    if not isinstance(session_id, str) or not _SESSION_ID_PATTERN.fullmatch(session_id):
        raise InvalidSessionIDError(str(session_id))
    return session_id


def validate_team_id(team_id: str) -> str:
    """Return a non-empty team label if well formed, else raise."""
    if not isinstance(team_id, str) or not _TEAM_ID_PATTERN.fullmatch(team_id):
        raise InvalidTeamIDError(str(team_id))
    return team_id


def check_ownership(path: PathLike) -> None:
    """Raise unless path is owned by the current process user.

    Running as root skips the check with a warning on stderr. A missing path
    raises FileNotFoundError.
    """
    getuid = getattr(os, "getuid", None)
    if getuid is None:
        raise SecurityError(f"ownership check unsupported on this platform (path {_quote(str(path))})")
    current_uid = getuid()
    if current_uid == 0:
        print(
            f"cab-bridge: running as root, ownership check skipped for {_quote(str(path))}",
            file=sys.stderr,
        )
        return
    info = os.stat(path)
    if info.st_uid != current_uid:
        raise OwnershipMismatchError(str(path), info.st_uid, current_uid)


def enforce_dir_perms(path: PathLike, mode: int) -> None:
    """Ensure path is a directory with exactly the permission bits in mode."""
    info = os.stat(path)
    if not stat.S_ISDIR(info.st_mode):
        raise NotADirectoryError(f"not a directory: {_quote(str(Path(path)))}")
    wanted = mode & 0o777
    if stat.S_IMODE(info.st_mode) & 0o777 == wanted:
        return
    os.chmod(path, mode)