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

"""Mount and unmount the encrypted private directory."""

import dataclasses
import enum
import logging

from ecryptfs_private import errors, mode, passphrase
from ecryptfs_private.config import Configuration
from ecryptfs_private.mount_table import MountState, get_mount_state
from ecryptfs_private.utils import process

logger = logging.getLogger(__name__)

INSERT_WRAPPED_PASSPHRASE_COMMAND = "ecryptfs-insert-wrapped-passphrase-into-keyring"
UNWRAP_PASSPHRASE_COMMAND = "ecryptfs-unwrap-passphrase"
ADD_PASSPHRASE_COMMAND = "ecryptfs-add-passphrase"

# Messages from the unmount helper mapped to a description of the cause.
_UNMOUNT_FAILURE_CAUSES = [
    ("sessions still open", "Other sessions are still using the private directory."),
    ("busy", "The private directory is in use."),
    ("permission denied", "Permission denied."),
]


class MountStep(enum.Enum):
    """Steps of a private directory mount."""

    IDLE = "idle"
    SILENT_ATTEMPT = "silent-attempt"
    NEED_UNLOCK = "need-unlock"
    UNLOCKING = "unlocking"
    RETRY_ATTEMPT = "retry-attempt"
    MOUNTED = "mounted"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class MountOutcome:
    """The result of a successful mount.

    :param mount_attempts: How many times the mount helper was executed.
    :param unlocked: Whether the mount passphrase had to be added to the keyring.
    """

    mount_attempts: int
    unlocked: bool


class PrivateDir:
    """Operations on an encrypted private directory.

    Mounting first runs the mount helper relying on a key already present in
    the keyring. If that fails, the mount passphrase is unwrapped and added to
    the keyring, and the mount helper is executed once more.

    :param config: The private directory configuration.
    :param secret_source: Where to obtain the passphrase used to unwrap the
        mount passphrase. If not set, it is selected from the configuration.
    """

    def __init__(
        self,
        config: Configuration,
        *,
        secret_source: passphrase.SecretSource | None = None,
    ) -> None:
        self._config = config
        self._secret_source = secret_source
        self._log = process.ProcessLog(config.process_log)
        self._step = MountStep.IDLE

    @property
    def config(self) -> Configuration:
        """The private directory configuration."""
        return self._config

    @property
    def step(self) -> MountStep:
        """The current or last reached mount step."""
        return self._step

    def _set_step(self, step: MountStep) -> None:
        logger.debug("mount step: %s -> %s", self._step.value, step.value)
        self._step = step

    @property
    def state(self) -> MountState:
        """Whether the private directory is currently mounted."""
        return get_mount_state(self._config)

    def mount(self) -> MountOutcome:
        """Mount the private directory.

        :raises ConfigurationError: If the private directory is not set up.
        :raises DecryptionError: If the passphrase file cannot be decrypted.
        :raises UnlockError: If the passphrase cannot be added to the keyring.
        :raises MountError: If the private directory cannot be mounted.
        """
        self._set_step(MountStep.IDLE)
        self._config.check_mount_files()
        self._config.check_command(self._config.mount_command)

        self._set_step(MountStep.SILENT_ATTEMPT)
        result = self._run_mount_helper()
        if result.ok:
            self._set_step(MountStep.MOUNTED)
            return MountOutcome(mount_attempts=1, unlocked=False)

        self._set_step(MountStep.NEED_UNLOCK)
        try:
            self.unlock()
        except errors.PrivateDirError:
            self._set_step(MountStep.FAILED)
            raise

        self._set_step(MountStep.RETRY_ATTEMPT)
        result = self._run_mount_helper()
        if not result.ok:
            self._set_step(MountStep.FAILED)
            raise errors.MountError(
                self._config.private_dir_name, result.returncode, self._log.path
            )

        self._set_step(MountStep.MOUNTED)
        return MountOutcome(mount_attempts=2, unlocked=True)

    def unlock(self) -> None:
        """Add the mount passphrase to the keyring.

        :raises ConfigurationError: If an unlock command is not installed.
        :raises DecryptionError: If the passphrase file cannot be decrypted.
        :raises UnlockError: If the unlock command fails.
        """
        filename_encryption = mode.is_filename_encryption_enabled(
            self._config.signature_file
        )
        logger.debug("filename encryption enabled: %s", filename_encryption)

        with passphrase.passphrase(
            self._config, source=self._secret_source
        ) as secret:
            self._set_step(MountStep.UNLOCKING)
            try:
                result = self._run_unlock(filename_encryption, secret)
            except FileNotFoundError as err:
                raise errors.ConfigurationError(
                    self._config.private_dir_name,
                    f"Command {err.filename!r} not found.",
                ) from err

        if not result.ok:
            raise errors.UnlockError(
                self._config.private_dir_name, result.returncode, self._log.path
            )

    def unlock_commands(self, filename_encryption: bool) -> list[list[str]]:
        """Return the commands adding the mount passphrase to the keyring.

        The commands read the passphrase from their standard input. With
        filename encryption a single command unwraps and inserts both keys,
        otherwise the unwrapped passphrase is piped to a second command.

        :param filename_encryption: Whether file names are encrypted.
        """
        wrapped = str(self._config.wrapped_passphrase_file)
        if filename_encryption:
            return [[INSERT_WRAPPED_PASSPHRASE_COMMAND, wrapped, "-"]]

        return [
            [UNWRAP_PASSPHRASE_COMMAND, wrapped, "-"],
            [ADD_PASSPHRASE_COMMAND, "-"],
        ]

    def _run_unlock(
        self, filename_encryption: bool, secret: bytearray
    ) -> process.ProcessResult:
        commands = self.unlock_commands(filename_encryption)
        stdin = secret + b"\n"
        try:
            if len(commands) == 1:
                return process.run(commands[0], stdin=stdin, log=self._log)
            return process.run_pipeline(*commands, stdin=stdin, log=self._log)
        finally:
            passphrase.wipe(stdin)

    def _run_mount_helper(self) -> process.ProcessResult:
        return process.run([self._config.mount_command], log=self._log)

    def unmount(self) -> process.ProcessResult:
        """Unmount the private directory.

        :raises ConfigurationError: If the unmount helper is not installed.
        :raises UnmountError: If the unmount helper fails.
        """
        self._config.check_command(self._config.umount_command)

        result = process.run([self._config.umount_command], log=self._log)
        if not result.ok:
            raise errors.UnmountError(
                self._config.private_dir_name,
                result.returncode,
                self._log.path,
                cause=unmount_failure_cause(result.output),
            )

        return result

    def toggle(self) -> MountState:
        """Mount the private directory if it is not mounted, unmount it otherwise.

        :returns: The private directory state after the operation.
        """
        if self.state == MountState.MOUNTED:
            self.unmount()
            return MountState.NOT_MOUNTED

        self.mount()
        return MountState.MOUNTED


def unmount_failure_cause(output: str) -> str | None:
    """Find the reason of an unmount failure in the helper output."""
    output = output.lower()
    for message, cause in _UNMOUNT_FAILURE_CAUSES:
        if message in output:
            return cause

    return None
