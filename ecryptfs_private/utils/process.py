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

"""Utilities for executing helper processes and recording their output."""

import logging
import os
import select
import selectors
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from ecryptfs_private.errors import ProcessError

logger = logging.getLogger(__name__)

Command = Sequence[str | Path]

# writes of up to PIPE_BUF bytes to a writable pipe do not block
_BUF_SIZE = select.PIPE_BUF


@dataclass
class ProcessResult:
    """Describes the outcome of a process or pipeline."""

    returncode: int
    stdout: bytes
    stderr: bytes
    command: Command

    @property
    def ok(self) -> bool:
        """Whether the process exited successfully."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """The captured stdout and stderr streams, decoded."""
        return (self.stdout + self.stderr).decode(errors="replace")

    def check_returncode(self, log_path: Path | None = None) -> None:
        """Raise an exception if the process returned non-zero."""
        if self.returncode != 0:
            raise ProcessError(format_command(self.command), self.returncode, log_path)


class ProcessLog:
    """Append the output of helper processes to a log file.

    :param path: The log file. If None, process output is only sent to the
        debug log.
    """

    def __init__(self, path: Path | None) -> None:
        self.path = path

    def record(self, result: ProcessResult) -> None:
        """Write the command, its exit status and its output to the log."""
        logger.debug(
            "%s exited with status %d", format_command(result.command), result.returncode
        )
        if self.path is None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a") as log_file:
            log_file.write(f"$ {format_command(result.command)}\n")
            output = result.output
            if output:
                log_file.write(output if output.endswith("\n") else output + "\n")
            log_file.write(f"[exit status {result.returncode}]\n")


def format_command(command: Command) -> str:
    """Return a printable form of a command or pipeline."""
    if command and not isinstance(command[0], (str, Path)):
        return " | ".join(format_command(cmd) for cmd in command)  # type: ignore[arg-type]

    return shlex.join(str(arg) for arg in command)


def run(
    command: Command,
    *,
    stdin: bytes | bytearray | None = None,
    log: ProcessLog | None = None,
    check: bool = False,
) -> ProcessResult:
    """Execute a process and collect its output.

    :param command: Command to execute.
    :param stdin: Data to write to the process standard input.
    :param log: Where to record the process output.
    :param check: If True, a ProcessError exception will be raised if ``command``
        returns a non-zero return code.

    :raises ProcessError: If check is set and the process exits with a non-zero
        return code.
    :raises OSError: If the specified executable is not found.

    :return: A description of the process' outcome.
    """
    logger.debug("run %s", format_command(command))
    proc = subprocess.run(
        [str(arg) for arg in command],
        input=stdin,
        stdin=None if stdin is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )
    result = ProcessResult(
        proc.returncode, proc.stdout or b"", proc.stderr or b"", command
    )

    if log:
        log.record(result)

    if check:
        result.check_returncode(log.path if log else None)

    return result


def run_pipeline(
    first: Command,
    second: Command,
    *,
    stdin: bytes | bytearray | None = None,
    log: ProcessLog | None = None,
) -> ProcessResult:
    """Execute two processes, sending the output of the first to the second.

    The pipeline succeeds only if both processes succeed. The return code of
    the result is the first non-zero exit status, stdout is the output of the
    second process and stderr is the error output of both.

    :param first: The first command of the pipeline.
    :param second: The command reading the first command's output.
    :param stdin: Data to write to the first process standard input.
    :param log: Where to record the pipeline output.

    :raises OSError: If any of the executables is not found.

    :return: A description of the pipeline outcome.
    """
    command = (first, second)
    logger.debug("run %s", format_command(command))

    with subprocess.Popen(
        [str(arg) for arg in first],
        stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    ) as first_proc:
        with subprocess.Popen(
            [str(arg) for arg in second],
            stdin=first_proc.stdout,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        ) as second_proc:
            # the second process owns the read end of the pipe now
            if first_proc.stdout:
                first_proc.stdout.close()

            streams = _communicate(
                first_proc.stdin,
                stdin or b"",
                {
                    "stdout": second_proc.stdout,
                    "first_err": first_proc.stderr,
                    "second_err": second_proc.stderr,
                },
            )
            second_proc.wait()
        first_proc.wait()

    returncode = first_proc.returncode or second_proc.returncode
    result = ProcessResult(
        returncode,
        streams["stdout"],
        streams["first_err"] + streams["second_err"],
        command,
    )

    if log:
        log.record(result)

    return result


def _communicate(
    writer: IO[bytes] | None,
    data: bytes | bytearray,
    readers: dict[str, IO[bytes] | None],
) -> dict[str, bytes]:
    """Write data to a stream while collecting the output of other streams.

    All streams are serviced together, so a process filling one of its output
    pipes cannot block the others. The writer is closed once all data is
    written or the reading process exits.

    :returns: The data read from each stream, by name.
    """
    output = {name: bytearray() for name in readers}

    with selectors.DefaultSelector() as selector, memoryview(data) as view:
        offset = 0
        if writer:
            if view:
                selector.register(writer, selectors.EVENT_WRITE)
            else:
                writer.close()

        for name, stream in readers.items():
            if stream:
                selector.register(stream, selectors.EVENT_READ, name)

        while selector.get_map():
            for key, _ in selector.select():
                if key.fileobj is writer:
                    try:
                        offset += os.write(key.fd, view[offset : offset + _BUF_SIZE])
                    except BrokenPipeError:
                        # the process exited without reading, its status tells why
                        logger.debug("pipeline input not fully read")
                        offset = len(view)
                    if offset >= len(view):
                        selector.unregister(writer)
                        writer.close()
                    continue

                chunk = os.read(key.fd, _BUF_SIZE)
                if chunk:
                    output[key.data].extend(chunk)
                else:
                    selector.unregister(key.fileobj)

    return {name: bytes(buffer) for name, buffer in output.items()}
