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

"""Detect the private directory encryption mode."""

from pathlib import Path


def is_filename_encryption_enabled(signature_file: Path) -> bool:
    """Verify if file names in the private directory are encrypted.

    The signature file holds one signature per line: the file content
    encryption key, followed by the filename encryption key if filename
    encryption is enabled. Every line is counted, empty ones included.

    :param signature_file: The mount passphrase signature file.

    :returns: False if the file contains exactly one signature, True otherwise.

    :raises OSError: If the signature file cannot be read.
    """
    return len(signature_file.read_text().splitlines()) != 1
