# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2026 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import pytest
import yaml
from ecryptfs_private import errors, main
from ecryptfs_private.mount_table import MountState
from ecryptfs_private.private_dir import MountOutcome, PrivateDir


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config.marshal()))
    return path


def _main(config_file, *args):
    main.main(["--config", str(config_file), *args])


def test_version(capsys, project_main_module):
    with pytest.raises(SystemExit) as raised:
        main.main(["--version"])

    assert raised.value.code is None
    assert capsys.readouterr().out == (
        f"ecryptfs-private {project_main_module.__version__}\n"
    )


def test_no_command(capsys):
    with pytest.raises(SystemExit) as raised:
        main.main([])

    assert raised.value.code == 4
    assert capsys.readouterr().err == "Error: a command is required.\n"


def test_mount(config_file, capsys, mocker):
    mock_mount = mocker.patch.object(
        PrivateDir, "mount", return_value=MountOutcome(mount_attempts=1, unlocked=False)
    )

    _main(config_file, "mount")

    mock_mount.assert_called_once_with()
    assert capsys.readouterr().out == "Encrypted private directory Private mounted.\n"


@pytest.mark.parametrize("command", ["unmount", "umount"])
def test_unmount(config_file, capsys, mocker, command):
    mock_unmount = mocker.patch.object(PrivateDir, "unmount")

    _main(config_file, command)

    mock_unmount.assert_called_once_with()
    assert capsys.readouterr().out == "Encrypted private directory Private unmounted.\n"


@pytest.mark.parametrize(
    ("state", "message"),
    [
        (MountState.MOUNTED, "Encrypted private directory Private mounted.\n"),
        (MountState.NOT_MOUNTED, "Encrypted private directory Private unmounted.\n"),
    ],
)
def test_toggle(config_file, capsys, mocker, state, message):
    mocker.patch.object(PrivateDir, "toggle", return_value=state)

    _main(config_file, "toggle")

    assert capsys.readouterr().out == message


def test_status(config_file, capsys, mocker):
    mocker.patch(
        "ecryptfs_private.private_dir.get_mount_state",
        return_value=MountState.NOT_MOUNTED,
    )

    _main(config_file, "status")

    assert capsys.readouterr().out == (
        "Encrypted private directory Private is not mounted.\n"
    )


def test_check(config_file, capsys):
    _main(config_file, "check")

    assert capsys.readouterr().out == (
        "Encrypted private directory Private is available.\n"
    )


def test_check_not_available(config_file, config, capsys):
    config.signature_file.unlink()

    with pytest.raises(SystemExit) as raised:
        _main(config_file, "check")

    assert raised.value.code == 1
    assert capsys.readouterr().out == (
        "Encrypted private directory Private is not available.\n"
        f"Missing: {config.signature_file}\n"
    )


def test_private_dir_name_override(config_file, config, capsys):
    with pytest.raises(SystemExit) as raised:
        _main(config_file, "--private-dir-name", "Other", "check")

    assert raised.value.code == 1
    out = capsys.readouterr().out
    assert out.startswith("Encrypted private directory Other is not available.\n")
    assert f"Missing: {config.home_dir / 'Other'}\n" in out


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (errors.ConfigurationError("Private", "File '/x' does not exist."), 1),
        (errors.DecryptionError("/secret.gpg", "bad key"), 2),
        (errors.UnlockError("Private", 1, None), 2),
        (errors.MountError("Private", 1, None), 3),
        (errors.UnmountError("Private", 1, None), 3),
        (FileNotFoundError(2, "No such file or directory", "/sbin/mount"), 4),
    ],
)
def test_mount_errors(config_file, capsys, mocker, error, code):
    mocker.patch.object(PrivateDir, "mount", side_effect=error)

    with pytest.raises(SystemExit) as raised:
        _main(config_file, "mount")

    assert raised.value.code == code
    assert capsys.readouterr().err.startswith("Error: ")


def test_mount_error_message(config_file, capsys, mocker, tmp_path):
    mocker.patch.object(
        PrivateDir,
        "mount",
        side_effect=errors.MountError("Private", 1, tmp_path / "process.log"),
    )

    with pytest.raises(SystemExit):
        _main(config_file, "mount")

    assert capsys.readouterr().err == (
        "Error: Failed to mount encrypted private directory 'Private' "
        "(exit status 1).\n"
        f"Check {str(tmp_path / 'process.log')!r} for the process output.\n"
    )


def test_invalid_config_file(tmp_path, capsys):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("color: red\n")

    with pytest.raises(SystemExit) as raised:
        _main(config_file, "status")

    assert raised.value.code == 1
    assert "extra field 'color' not permitted" in capsys.readouterr().err
