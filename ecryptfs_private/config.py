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

"""Encrypted private directory configuration."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from xdg import BaseDirectory  # type: ignore

from ecryptfs_private import errors

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
WRAPPED_PASSPHRASE_FILE_NAME = "wrapped-passphrase"
PROCESS_LOG_FILE_NAME = "process.log"
APP_NAME = "ecryptfs-private"


def _default_process_log() -> Path:
    return Path(BaseDirectory.xdg_cache_home, APP_NAME, PROCESS_LOG_FILE_NAME)


class Configuration(BaseModel):
    """The locations used to mount and unmount an encrypted private directory.

    The configuration is resolved once and is read-only afterwards. Relative
    paths and paths starting with ``~`` are expanded to absolute paths.

    :ivar root_dir: The directory containing the wrapped passphrase and the
        mount passphrase signature files.
    :ivar private_dir_name: The name of the private directory in the user's home.
    :ivar passphrase_file: An optional GnuPG-encrypted file containing the
        mount passphrase in its first line.
    :ivar mount_command: The private directory mount helper.
    :ivar umount_command: The private directory unmount helper.
    :ivar home_dir: The directory containing the private directory.
    :ivar mount_table_command: The command listing mounted filesystems.
    :ivar filesystem_type: The filesystem type shown in the mount table.
    :ivar gpg_command: The command used to decrypt the passphrase file.
    :ivar process_log: The file where helper process output is recorded.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=lambda s: s.replace("_", "-"),
        populate_by_name=True,
        validate_default=True,
    )

    root_dir: Path = Path("~/.ecryptfs")
    private_dir_name: str = Field(default="Private", min_length=1)
    passphrase_file: Path | None = None
    mount_command: Path = Path("/sbin/mount.ecryptfs_private")
    umount_command: Path = Path("/sbin/umount.ecryptfs_private")
    home_dir: Path = Path("~")
    mount_table_command: list[str] = Field(default=["mount"], min_length=1)
    filesystem_type: str = Field(default="ecryptfs", min_length=1)
    gpg_command: str = Field(default="gpg", min_length=1)
    process_log: Path = Field(default_factory=_default_process_log)

    @field_validator(
        "root_dir",
        "passphrase_file",
        "mount_command",
        "umount_command",
        "home_dir",
        "process_log",
        mode="after",
    )
    @classmethod
    def expand_path(cls, value: Path | None) -> Path | None:
        """Make sure all paths are absolute."""
        if value is None:
            return None
        return value.expanduser().absolute()

    @field_validator("private_dir_name", mode="after")
    @classmethod
    def plain_name(cls, value: str) -> str:
        """The private directory name must not contain a path separator."""
        if "/" in value:
            raise ValueError("must be a directory name, not a path")
        return value

    @property
    def private_dir(self) -> Path:
        """The private directory mount point."""
        return self.home_dir / self.private_dir_name

    @property
    def wrapped_passphrase_file(self) -> Path:
        """The file containing the wrapped mount passphrase."""
        return self.root_dir / WRAPPED_PASSPHRASE_FILE_NAME

    @property
    def signature_file(self) -> Path:
        """The file containing the mount passphrase signatures."""
        return self.root_dir / f"{self.private_dir_name}.sig"

    def missing(self) -> list[Path]:
        """Return the required files and directories that do not exist."""
        required = [
            self.private_dir,
            self.mount_command,
            self.umount_command,
            self.wrapped_passphrase_file,
            self.signature_file,
        ]
        return [path for path in required if not path.exists()]

    def available(self) -> bool:
        """Verify if the encrypted private directory is set up.

        :returns: Whether the private directory, the mount and unmount helpers,
            the wrapped passphrase file and the signature file exist.
        """
        return not self.missing()

    def check_mount_files(self) -> None:
        """Make sure the files needed to mount the private directory exist.

        :raises ConfigurationError: If the wrapped passphrase or the signature
            file is missing.
        """
        for path in (self.wrapped_passphrase_file, self.signature_file):
            if not path.is_file():
                raise errors.ConfigurationError(
                    self.private_dir_name, f"File {str(path)!r} does not exist."
                )

    def check_command(self, command: Path) -> None:
        """Make sure a helper executable exists.

        :raises ConfigurationError: If the helper is missing.
        """
        if not command.exists():
            raise errors.ConfigurationError(
                self.private_dir_name, f"Command {str(command)!r} does not exist."
            )

    @classmethod
    def unmarshal(cls, data: dict[str, Any]) -> "Configuration":
        """Create and populate a new ``Configuration`` object from dictionary data.

        :param data: The dictionary data to unmarshal.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        :raise ConfigurationError: If the data fails validation.
        """
        if not isinstance(data, dict):
            raise TypeError("Configuration data must be a dictionary.")

        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise errors.ConfigurationError.from_validation_error(
                private_dir_name=str(data.get("private-dir-name", "Private")),
                error_list=err.errors(),
            ) from err

    def marshal(self) -> dict[str, Any]:
        """Create a dictionary containing the configuration data."""
        return self.model_dump(mode="json", by_alias=True)


def default_config_file() -> Path:
    """Return the path of the user configuration file."""
    return Path(BaseDirectory.xdg_config_home, APP_NAME, CONFIG_FILE_NAME)


def load_configuration(
    path: Path | None = None, overrides: dict[str, Any] | None = None
) -> Configuration:
    """Load the configuration from a YAML file.

    If no path is given the user configuration file is used, and defaults are
    used if it does not exist.

    :param path: The configuration file to load.
    :param overrides: Values taking precedence over the ones in the file.

    :raise ConfigurationError: If the file is invalid.
    :raise OSError: If an explicitly requested file cannot be read.
    """
    if path is None:
        path = default_config_file()
        if not path.exists():
            logger.debug("configuration file %s not found, using defaults", path)
            path = None

    data: Any = {}
    if path is not None:
        logger.debug("load configuration from %s", path)
        with path.open() as config_file:
            data = yaml.safe_load(config_file) or {}

        if not isinstance(data, dict):
            raise errors.ConfigurationError(
                "Private", f"File {str(path)!r} does not contain a mapping."
            )

    if overrides:
        data = {**data, **{k: v for k, v in overrides.items() if v is not None}}

    return Configuration.unmarshal(data)
