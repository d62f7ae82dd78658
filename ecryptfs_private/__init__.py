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

"""Mount and unmount an eCryptfs encrypted private directory."""

from .config import Configuration, load_configuration
from .errors import PrivateDirError
from .mode import is_filename_encryption_enabled
from .mount_table import MountState, is_private_mounted
from .passphrase import GpgFileSource, PromptSource, SecretSource
from .private_dir import MountOutcome, MountStep, PrivateDir


try:
    from ._version import __version__
except ImportError:  # pragma: no cover
    from importlib.metadata import version, PackageNotFoundError

    try:
        __version__ = version("ecryptfs_private")
    except PackageNotFoundError:
        __version__ = "dev"


__all__ = [
    "__version__",
    "Configuration",
    "GpgFileSource",
    "MountOutcome",
    "MountState",
    "MountStep",
    "PrivateDir",
    "PrivateDirError",
    "PromptSource",
    "SecretSource",
    "is_filename_encryption_enabled",
    "is_private_mounted",
    "load_configuration",
]
