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

"""Encrypted private directory errors."""

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


@dataclasses.dataclass(repr=True)
class PrivateDirError(Exception):
    """Unexpected error.

    :param brief: Brief description of error.
    :param details: Detailed information.
    :param resolution: Recommendation, if any.
    """

    brief: str
    details: str | None = None
    resolution: str | None = None

    def __str__(self) -> str:
        components = [self.brief]

        if self.details:
            components.append(self.details)

        if self.resolution:
            components.append(self.resolution)

        return "\n".join(components)


class ConfigurationError(PrivateDirError):
    """The encrypted private directory is not set up properly.

    :param private_dir_name: The private directory name.
    :param message: What is wrong with the setup.
    """

    def __init__(self, private_dir_name: str, message: str) -> None:
        self.private_dir_name = private_dir_name
        self.message = message
        brief = (
            f"Encrypted private directory {private_dir_name!r} "
            "is not set up properly."
        )
        resolution = "Run 'ecryptfs-setup-private' or review the configuration."

        super().__init__(brief=brief, details=message, resolution=resolution)

    @classmethod
    def from_validation_error(
        cls, *, private_dir_name: str, error_list: list["ErrorDetails"]
    ) -> "ConfigurationError":
        """Create a ConfigurationError from a pydantic error list.

        :param private_dir_name: The private directory name.
        :param error_list: A list of dictionaries containing pydantic error definitions.
        """
        formatted_errors: list[str] = []

        for error in error_list:
            loc = error.get("loc")
            msg = error.get("msg")

            if not (loc and msg):
                continue

            field = ".".join(str(part) for part in loc)
            if error.get("type") == "extra_forbidden":
                formatted_errors.append(f"- extra field {field!r} not permitted")
            else:
                formatted_errors.append(f"- {msg} in field {field!r}")

        return cls(private_dir_name, "\n".join(formatted_errors))


class DecryptionError(PrivateDirError):
    """Failed to decrypt the passphrase file.

    :param passphrase_file: The encrypted passphrase file.
    :param message: The error message.
    """

    def __init__(self, passphrase_file: str, message: str) -> None:
        self.passphrase_file = passphrase_file
        self.message = message
        brief = f"Failed to decrypt passphrase file {passphrase_file}."
        resolution = "Make sure the file can be decrypted with 'gpg --decrypt'."

        super().__init__(brief=brief, details=message, resolution=resolution)


class ProcessError(PrivateDirError):
    """A helper process exited with a non-zero status.

    :param command: The command that failed.
    :param returncode: The process exit status.
    :param log_path: Where the process output was recorded.
    """

    def __init__(self, command: str, returncode: int, log_path: Path | None) -> None:
        self.command = command
        self.returncode = returncode
        self.log_path = log_path
        brief = f"Command {command!r} exited with status {returncode}."

        super().__init__(brief=brief, resolution=_see_log(log_path))


class UnlockError(PrivateDirError):
    """Failed to add the mount passphrase to the keyring.

    :param private_dir_name: The private directory name.
    :param returncode: The unlock command exit status.
    :param log_path: Where the process output was recorded.
    """

    def __init__(
        self, private_dir_name: str, returncode: int, log_path: Path | None
    ) -> None:
        self.private_dir_name = private_dir_name
        self.returncode = returncode
        self.log_path = log_path
        brief = (
            f"Failed to unlock encrypted private directory {private_dir_name!r} "
            f"(exit status {returncode})."
        )

        super().__init__(brief=brief, resolution=_see_log(log_path))


class MountError(PrivateDirError):
    """Failed to mount the encrypted private directory.

    :param private_dir_name: The private directory name.
    :param returncode: The mount helper exit status.
    :param log_path: Where the process output was recorded.
    """

    def __init__(
        self, private_dir_name: str, returncode: int, log_path: Path | None
    ) -> None:
        self.private_dir_name = private_dir_name
        self.returncode = returncode
        self.log_path = log_path
        brief = (
            f"Failed to mount encrypted private directory {private_dir_name!r} "
            f"(exit status {returncode})."
        )

        super().__init__(brief=brief, resolution=_see_log(log_path))


class UnmountError(PrivateDirError):
    """Failed to unmount the encrypted private directory.

    :param private_dir_name: The private directory name.
    :param returncode: The unmount helper exit status.
    :param log_path: Where the process output was recorded.
    :param cause: The failure cause found in the process output, if any.
    """

    def __init__(
        self,
        private_dir_name: str,
        returncode: int,
        log_path: Path | None,
        cause: str | None = None,
    ) -> None:
        self.private_dir_name = private_dir_name
        self.returncode = returncode
        self.log_path = log_path
        self.cause = cause
        brief = (
            f"Failed to unmount encrypted private directory {private_dir_name!r} "
            f"(exit status {returncode})."
        )
        if cause:
            details = cause
        else:
            details = "Perhaps it is already unmounted."

        super().__init__(brief=brief, details=details, resolution=_see_log(log_path))


def _see_log(log_path: Path | None) -> str | None:
    if log_path is None:
        return None
    return f"Check {str(log_path)!r} for the process output."
