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

import types
from pathlib import Path

import pytest
from ecryptfs_private.config import Configuration


@pytest.fixture
def project_main_module() -> types.ModuleType:
    """Fixture that returns the project's principal package (imported)."""
    try:
        import ecryptfs_private  # noqa: PLC0415

        main_module = ecryptfs_private
    except ImportError:
        pytest.fail(
            "Failed to import the project's main module: check if it needs updating",
        )
    return main_module


@pytest.fixture
def new_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def home_dir(tmp_path) -> Path:
    home = tmp_path / "home"
    (home / "Private").mkdir(parents=True)
    return home


@pytest.fixture
def root_dir(home_dir) -> Path:
    """An ecryptfs directory with a wrapped passphrase and a signature file."""
    root = home_dir / ".ecryptfs"
    root.mkdir()
    (root / "wrapped-passphrase").write_bytes(b"\x3a\x02wrapped")
    (root / "Private.sig").write_text("ABCDEF\n")
    return root


@pytest.fixture
def helpers_dir(tmp_path) -> Path:
    """A directory containing fake mount and unmount helpers."""
    sbin = tmp_path / "sbin"
    sbin.mkdir()
    for name in ("mount.ecryptfs_private", "umount.ecryptfs_private"):
        helper = sbin / name
        helper.write_text("#!/bin/sh\nexit 0\n")
        helper.chmod(0o755)
    return sbin


@pytest.fixture
def config(tmp_path, home_dir, root_dir, helpers_dir) -> Configuration:
    return Configuration(
        root_dir=root_dir,
        home_dir=home_dir,
        mount_command=helpers_dir / "mount.ecryptfs_private",
        umount_command=helpers_dir / "umount.ecryptfs_private",
        process_log=tmp_path / "log" / "process.log",
    )
