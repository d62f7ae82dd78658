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

"""Encrypted private directory command line tool.

This is the main entry point for the ecryptfs_private package, invoked
when running `ecryptfs-private` or `python -mecryptfs_private`. It mounts,
unmounts or toggles the private directory, and reports its state.
"""

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

import ecryptfs_private
import ecryptfs_private.errors
from ecryptfs_private import MountState, PrivateDir, load_configuration


def main(argv: list[str] | None = None) -> None:
    """Run the command-line interface."""
    options = _parse_arguments(argv)

    if options.version:
        print(f"ecryptfs-private {ecryptfs_private.__version__}")
        sys.exit()

    if not options.command:
        print("Error: a command is required.", file=sys.stderr)
        sys.exit(4)

    if options.trace:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(level=log_level)

    try:
        _run_command(options)
    except OSError as err:
        msg = err.strerror
        if err.filename:
            msg = f"{err.filename}: {msg}"
        print(f"Error: {msg}.", file=sys.stderr)
        sys.exit(4)
    except ecryptfs_private.errors.ConfigurationError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(1)
    except (
        ecryptfs_private.errors.DecryptionError,
        ecryptfs_private.errors.UnlockError,
    ) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(2)
    except ecryptfs_private.errors.PrivateDirError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(3)
    except (ValueError, TypeError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(4)


def _run_command(options: argparse.Namespace) -> None:
    overrides = {
        "root-dir": options.root_dir,
        "private-dir-name": options.private_dir_name,
        "passphrase-file": options.passphrase_file,
    }
    config_file = Path(options.config) if options.config else None
    config = load_configuration(config_file, overrides=overrides)
    name = config.private_dir_name

    if options.command == "check":
        _do_check(config)
        return

    private_dir = PrivateDir(config)

    if options.command == "status":
        print(f"Encrypted private directory {name} is {private_dir.state}.")
    elif options.command == "mount":
        private_dir.mount()
        print(f"Encrypted private directory {name} mounted.")
    elif options.command in ("unmount", "umount"):
        private_dir.unmount()
        print(f"Encrypted private directory {name} unmounted.")
    elif options.command == "toggle":
        if private_dir.toggle() == MountState.MOUNTED:
            print(f"Encrypted private directory {name} mounted.")
        else:
            print(f"Encrypted private directory {name} unmounted.")


def _do_check(config: ecryptfs_private.Configuration) -> None:
    missing = config.missing()
    if not missing:
        print(f"Encrypted private directory {config.private_dir_name} is available.")
        return

    print(f"Encrypted private directory {config.private_dir_name} is not available.")
    for path in missing:
        print(f"Missing: {path}")
    sys.exit(1)


def _parse_arguments(argv: list[str] | None) -> argparse.Namespace:
    prog = "ecryptfs-private"
    description = "Mount and unmount an eCryptfs encrypted private directory."

    parser = argparse.ArgumentParser(prog=prog, description=description, add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="filename",
        help="The configuration file. Default is the user configuration file.",
    )
    parser.add_argument(
        "--root-dir",
        metavar="dirname",
        help="The directory containing the wrapped passphrase. Default is '~/.ecryptfs'.",
    )
    parser.add_argument(
        "--private-dir-name",
        metavar="name",
        help="The private directory name. Default is 'Private'.",
    )
    parser.add_argument(
        "--passphrase-file",
        metavar="filename",
        help="A GnuPG-encrypted file containing the passphrase.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable debug messages.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the ecryptfs-private version and exit.",
    )

    help_parser = argparse.ArgumentParser(add_help=False)
    help_parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    add_subparser = partial(
        subparsers.add_parser, add_help=False, parents=[help_parser]
    )

    add_subparser("mount", help="Mount the private directory.")
    add_subparser("unmount", aliases=["umount"], help="Unmount the private directory.")
    add_subparser(
        "toggle", help="Mount the private directory, or unmount it if mounted."
    )
    add_subparser("status", help="Show whether the private directory is mounted.")
    add_subparser("check", help="Verify if the private directory is set up.")

    return parser.parse_args(argv)
