import os
import stat
from unittest import mock

import pytest

from cabbridge.security import (
    InvalidSessionIDError,
    InvalidTeamIDError,
    OwnershipMismatchError,
    SecurityError,
    check_ownership,
    enforce_dir_perms,
    validate_session_id,
    validate_team_id,
)


@pytest.mark.parametrize(
    "session_id",
    [
        "abc123",
        "123456",
        "abcdef",
        "abcdef0123456789abcdef0123456789",
        "cliagentsbridgevalmain",
    ],
)
def test_validate_session_id_accepts(session_id):
    assert validate_session_id(session_id) == session_id


@pytest.mark.parametrize(
    "session_id",
    [
        "abc12",
        "abcdef0123456789abcdef0123456789x",
        "",
        "ABCdef",
        "abc-12",
        "abc_12",
        "abc.12",
        "abc 12",
        "abc12à",
        "../../etc/passwd",
        "abc/12",
        "abc\\12",
        "/etc/passwd",
        "abc12\x00",
        "abc12\n",
    ],
)
def test_validate_session_id_rejects(session_id):
    with pytest.raises(InvalidSessionIDError) as excinfo:
        validate_session_id(session_id)
    assert isinstance(excinfo.value, SecurityError)
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    "team_id",
    ["a", "1", "alpha", "team-1", "team_1", "0ab-c_d", "a234567890123456789012345678901b"],
)
def test_validate_team_id_accepts(team_id):
    assert validate_team_id(team_id) == team_id


@pytest.mark.parametrize(
    "team_id",
    [
        "",
        "a2345678901234567890123456789012x",
        "Team",
        "-x",
        "_x",
        "team 1",
        "team.1",
        "team/1",
        "../x",
        "tëam",
    ],
)
def test_validate_team_id_rejects(team_id):
    with pytest.raises(InvalidTeamIDError):
        validate_team_id(team_id)


def test_invalid_team_error_message():
    with pytest.raises(InvalidTeamIDError, match="invalid team ID"):
        validate_team_id("Bad Name")


def test_check_ownership_own_file_then_mismatch(tmp_path):
    owned = tmp_path / "owned.txt"
    owned.write_text("test")
    file_uid = owned.stat().st_uid
    if os.getuid() != 0:
        check_ownership(owned)
    with mock.patch("os.getuid", return_value=file_uid + 1):
        with pytest.raises(OwnershipMismatchError) as excinfo:
            check_ownership(owned)
    assert excinfo.value.file_uid == file_uid
    assert excinfo.value.current_uid == file_uid + 1


def test_check_ownership_nonexistent_path(tmp_path):
    with mock.patch("os.getuid", return_value=12345):
        with pytest.raises(FileNotFoundError):
            check_ownership(tmp_path / "does-not-exist")


def test_check_ownership_root_skips_with_warning(tmp_path, capsys):
    with mock.patch("os.getuid", return_value=0):
        check_ownership(tmp_path / "does-not-exist")
    assert "ownership check skipped" in capsys.readouterr().err


def test_enforce_dir_perms_tightens(tmp_path):
    target = tmp_path / "tighten"
    target.mkdir()
    os.chmod(target, 0o755)
    enforce_dir_perms(target, 0o700)
    assert stat.S_IMODE(target.stat().st_mode) == 0o700


def test_enforce_dir_perms_idempotent(tmp_path):
    target = tmp_path / "already-tight"
    target.mkdir()
    os.chmod(target, 0o700)
    enforce_dir_perms(target, 0o700)
    enforce_dir_perms(target, 0o700)
    assert stat.S_IMODE(target.stat().st_mode) == 0o700


def test_enforce_dir_perms_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        enforce_dir_perms(tmp_path / "ghost", 0o700)


def test_enforce_dir_perms_file_instead_of_dir(tmp_path):
    target = tmp_path / "not-a-dir.txt"
    target.write_text("x")
    with pytest.raises(NotADirectoryError):
        enforce_dir_perms(target, 0o700)