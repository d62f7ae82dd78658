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

"""Obtain the passphrase used to unlock the private directory.

The passphrase is either the first line of a GnuPG-encrypted file, or it
is typed by the user. It is kept in a mutable buffer so it can be cleared
as soon as the unlock command has consumed it.
"""

import abc
import contextlib
import getpass
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from ecryptfs_private import errors
from ecryptfs_private.config import Configuration
from ecryptfs_private.utils import process

logger = logging.getLogger(__name__)


class SecretSource(abc.ABC):
    """A source of the mount passphrase."""

    @abc.abstractmethod
    def read(self) -> bytearray:
        """Obtain the passphrase.

        This may block on user input or on an external program.
        """


class GpgFileSource(SecretSource):
    """Read the passphrase from a GnuPG-encrypted file.

    Only the first line of the decrypted content is used, any following
    lines are ignored.

    :param path: The encrypted passphrase file.
    :param gpg_command: The GnuPG executable.
    """

    def __init__(self, path: Path, *, gpg_command: str = "gpg") -> None:
        self.path = path
        self.gpg_command = gpg_command

    def read(self) -> bytearray:
        """Decrypt the passphrase file.

        :raises DecryptionError: If the file cannot be decrypted.
        """
        logger.debug("decrypt passphrase from %s", self.path)
        # not recorded in the process log, the output is the passphrase
        try:
            result = process.run(
                [self.gpg_command, "--quiet", "--batch", "--decrypt", self.path]
            )
        except OSError as err:
            raise errors.DecryptionError(
                str(self.path),
                f"Command {self.gpg_command!r} could not be run: {err.strerror}.",
            ) from err
        plaintext = bytearray(result.stdout)
        try:
            if not result.ok:
                raise errors.DecryptionError(
                    str(self.path), result.stderr.decode(errors="replace").strip()
                )
            end = plaintext.find(b"\n")
            if end < 0:
                end = len(plaintext)
            return bytearray(plaintext[:end].rstrip(b"\r"))
        finally:
            wipe(plaintext)


class PromptSource(SecretSource):
    """Ask the user for the passphrase without echoing it.

    :param prompt: The message shown to the user.
    :param getpass_func: The function used to read the passphrase.
    """

    def __init__(
        self,
        prompt: str = "Passphrase: ",
        *,
        getpass_func: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self.prompt = prompt
        self._getpass = getpass_func

    def read(self) -> bytearray:
        return bytearray(self._getpass(self.prompt).encode())


def get_secret_source(config: Configuration) -> SecretSource:
    """Select how the passphrase is obtained for the given configuration.

    :param config: The private directory configuration.

    :returns: A source decrypting the configured passphrase file if it exists,
        or an interactive prompt otherwise.
    """
    if config.passphrase_file and config.passphrase_file.is_file():
        return GpgFileSource(config.passphrase_file, gpg_command=config.gpg_command)

    if config.passphrase_file:
        logger.debug("passphrase file %s not found", config.passphrase_file)

    return PromptSource(f"Passphrase for {config.private_dir_name}: ")


def resolve_passphrase(
    config: Configuration, *, source: SecretSource | None = None
) -> bytearray:
    """Obtain the mount passphrase.

    :param config: The private directory configuration.
    :param source: The passphrase source to use instead of the default one.

    :raises DecryptionError: If the passphrase file cannot be decrypted.
    """
    if source is None:
        source = get_secret_source(config)

    return source.read()


@contextlib.contextmanager
def passphrase(
    config: Configuration, *, source: SecretSource | None = None
) -> Iterator[bytearray]:
    """Provide the mount passphrase and clear it on exit."""
    secret = resolve_passphrase(config, source=source)
    try:
        yield secret
    finally:
        wipe(secret)


def wipe(buffer: bytearray) -> None:
    """Overwrite the contents of a buffer."""
    buffer[:] = bytes(len(buffer))
