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

"""Look up the private directory in the mount table."""

import enum
import logging
import re

from ecryptfs_private.config import Configuration
from ecryptfs_private.utils import process

logger = logging.getLogger(__name__)


class MountState(enum.Enum):
    """Whether the private directory is mounted."""

    MOUNTED = "mounted"
    NOT_MOUNTED = "not mounted"

    def __str__(self) -> str:
        return self.value


def read_mount_table(config: Configuration) -> str:
    """Return the list of mounted filesystems as text.

    :raises ProcessError: If the mount table command fails.
    """
    result = process.run(config.mount_table_command, check=True)
    return result.stdout.decode(errors="replace")


def is_private_mounted(config: Configuration, *, mount_table: str | None = None) -> bool:
    """Verify if the private directory is mounted.

    A line of the mount table must mention both the private directory path
    and the filesystem type. The path must be delimited by whitespace or the
    line ends, so a sibling directory sharing its prefix does not match. The
    table is scanned as text, not parsed.

    :param config: The private directory configuration.
    :param mount_table: The mount table text. If not set, it is obtained by
        running the configured mount table command.
    """
    if mount_table is None:
        mount_table = read_mount_table(config)

    private_dir = re.compile(rf"(?:^|\s){re.escape(str(config.private_dir))}(?:\s|$)")
    for line in mount_table.splitlines():
        if private_dir.search(line) and config.filesystem_type in line:
            logger.debug("private directory mounted: %s", line)
            return True

    return False


def get_mount_state(config: Configuration, *, mount_table: str | None = None) -> MountState:
    """Return the private directory mount state."""
    if is_private_mounted(config, mount_table=mount_table):
        return MountState.MOUNTED
    return MountState.NOT_MOUNTED
