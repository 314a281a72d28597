# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from hashlib import md5
from typing import Optional


def calc_file_checksum(filename) -> Optional[str]:
    """Calculate the MD5 checksum used to identify scanned files.

    Args:
        filename (str): Name of file.

    Returns:
        Optional[str]: The hex digest of the file, or None if the file does not exist.
    """
    md5_hash = md5()
    b = bytearray(4096)
    mv = memoryview(b)
    try:
        with open(filename, "rb", buffering=0) as f:
            while n := f.readinto(mv):
                md5_hash.update(mv[:n])
    except FileNotFoundError:
        return None
    return md5_hash.hexdigest()
