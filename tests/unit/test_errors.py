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

from pathlib import Path

from ecryptfs_private import errors


def test_private_dir_error_brief():
    err = errors.PrivateDirError(brief="A brief description.")
    assert str(err) == "A brief description."
    assert (
        repr(err)
        == "PrivateDirError(brief='A brief description.', details=None, resolution=None)"
    )
    assert err.brief == "A brief description."
    assert err.details is None
    assert err.resolution is None


def test_private_dir_error_full():
    err = errors.PrivateDirError(
        brief="Brief", details="Details", resolution="Resolution"
    )
    assert str(err) == "Brief\nDetails\nResolution"
    assert err.brief == "Brief"
    assert err.details == "Details"
    assert err.resolution == "Resolution"


def test_configuration_error():
    err = errors.ConfigurationError("Private", "File '/x' does not exist.")
    assert err.private_dir_name == "Private"
    assert err.message == "File '/x' does not exist."
    assert err.brief == (
        "Encrypted private directory 'Private' is not set up properly."
    )
    assert err.details == "File '/x' does not exist."
    assert err.resolution == (
        "Run 'ecryptfs-setup-private' or review the configuration."
    )


def test_configuration_error_from_validation_error():
    error_list = [
        {"loc": ("color",), "msg": "Extra inputs are not permitted", "type": "extra_forbidden"},
        {
            "loc": ("private-dir-name",),
            "msg": "String should have at least 1 character",
            "type": "string_too_short",
        },
        {"loc": (), "msg": "ignored", "type": "value_error"},
    ]

    err = errors.ConfigurationError.from_validation_error(
        private_dir_name="Private", error_list=error_list  # type: ignore[arg-type]
    )

    assert err.details == (
        "- extra field 'color' not permitted\n"
        "- String should have at least 1 character in field 'private-dir-name'"
    )


def test_decryption_error():
    err = errors.DecryptionError("/home/user/secret.gpg", "gpg: decryption failed")
    assert err.passphrase_file == "/home/user/secret.gpg"
    assert err.message == "gpg: decryption failed"
    assert err.brief == "Failed to decrypt passphrase file /home/user/secret.gpg."
    assert err.details == "gpg: decryption failed"
    assert err.resolution == "Make sure the file can be decrypted with 'gpg --decrypt'."


def test_process_error():
    err = errors.ProcessError("mount", 1, Path("/tmp/process.log"))
    assert err.command == "mount"
    assert err.returncode == 1
    assert err.brief == "Command 'mount' exited with status 1."
    assert err.resolution == "Check '/tmp/process.log' for the process output."


def test_process_error_no_log():
    err = errors.ProcessError("mount", 1, None)
    assert err.resolution is None
    assert str(err) == "Command 'mount' exited with status 1."


def test_unlock_error():
    err = errors.UnlockError("Private", 2, Path("/tmp/process.log"))
    assert err.private_dir_name == "Private"
    assert err.returncode == 2
    assert err.log_path == Path("/tmp/process.log")
    assert err.brief == (
        "Failed to unlock encrypted private directory 'Private' (exit status 2)."
    )
    assert err.details is None
    assert err.resolution == "Check '/tmp/process.log' for the process output."


def test_mount_error():
    err = errors.MountError("Private", 32, Path("/tmp/process.log"))
    assert err.returncode == 32
    assert err.brief == (
        "Failed to mount encrypted private directory 'Private' (exit status 32)."
    )
    assert err.resolution == "Check '/tmp/process.log' for the process output."


def test_unmount_error():
    err = errors.UnmountError("Private", 1, Path("/tmp/process.log"))
    assert err.cause is None
    assert err.brief == (
        "Failed to unmount encrypted private directory 'Private' (exit status 1)."
    )
    assert err.details == "Perhaps it is already unmounted."
    assert err.resolution == "Check '/tmp/process.log' for the process output."


def test_unmount_error_cause():
    err = errors.UnmountError(
        "Private", 1, None, cause="The private directory is in use."
    )
    assert err.cause == "The private directory is in use."
    assert err.details == "The private directory is in use."
    assert str(err) == (
        "Failed to unmount encrypted private directory 'Private' (exit status 1).\n"
        "The private directory is in use."
    )
