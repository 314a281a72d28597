# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import atexit
import gzip
import os
import pathlib
import shutil
import tarfile
import tempfile
import zipfile
from typing import List, Literal

from loguru import logger

from inventorykit.configmanager import ConfigManager

ZIP_EXTENSIONS = {"war", "zip", "nar", "jar", "ear", "aar", "sar", "nupkg"}
GZIP_EXTENSIONS = {"gz", "gzip"}
TAR_EXTENSIONS = {"tar", "tgz", "bz2", "xz"}
# extraction filters exist from Python 3.12 and in 3.9.17, 3.10.12, 3.11.4
TAR_EXTRACTION_FILTERS = hasattr(tarfile, "data_filter")

TAR_MODES = {
    "tar": "r:",
    "tgz": "r:gz",
    "bz2": "r:bz2",
    "xz": "r:xz",
}

# temporary directories created through create_extract_dir; removed at exit
EXTRACT_DIRS: List[str] = []


class UnsafeArchiveError(Exception):
    """An archive entry would be written outside of the target directory."""


def get_extension(filename: str) -> str:
    """Lower-case text after the last '.' of the file name; the whole name if it has no '.'."""
    name = pathlib.PurePath(filename).name.lower()
    index = name.rfind(".")
    if index == -1:
        return name
    return name[index + 1 :]


def is_archive(filename: str) -> bool:
    extension = get_extension(filename)
    return extension in ZIP_EXTENSIONS | GZIP_EXTENSIONS | TAR_EXTENSIONS


def _check_member_path(target_dir: str, member_name: str) -> None:
    target = os.path.realpath(target_dir)
    destination = os.path.realpath(os.path.join(target_dir, member_name))
    if destination != target and not destination.startswith(target + os.sep):
        raise UnsafeArchiveError(f"Entry {member_name} is outside of the target directory")


def decompress_zip_file(filename: str, output_folder: str) -> None:
    with zipfile.ZipFile(filename, "r") as f:
        for name in f.namelist():
            _check_member_path(output_folder, name)
        f.extractall(path=output_folder)
    logger.debug(f"Extracted ZIP contents to {output_folder}")


def decompress_gzip_file(filename: str, output_folder: str) -> None:
    filepath = pathlib.Path(filename)
    output_filename = filepath.stem if filepath.suffix else filepath.name
    with gzip.open(filename, "rb") as f_in:
        with open(os.path.join(output_folder, output_filename), "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
    logger.debug(f"Extracted GZIP contents to {output_folder}")


def extract_tar_file(
    filename: str,
    output_folder: str,
    open_mode: Literal["r:", "r:gz", "r:bz2", "r:xz"] = "r:",
) -> None:
    with tarfile.open(filename, open_mode) as tar:
        for member in tar.getmembers():
            _check_member_path(output_folder, member.name)
        if TAR_EXTRACTION_FILTERS:
            tar.extractall(path=output_folder, filter="data")
        else:
            tar.extractall(path=output_folder)
    logger.debug(f"Extracted TAR contents to {output_folder}")


def unpack_if_possible(archive_file: str, target_dir: str, include_modules: bool = True) -> bool:
    """Expand a zip, gzip or tar family archive into target_dir.

    Args:
        archive_file (str): Path of the archive.
        target_dir (str): Folder to expand into; created when missing.
        include_modules (bool): Whether jar files are expanded as well.

    Returns:
        bool: True if the archive was expanded. Unsupported extensions and broken archives
        return False; a target folder created for a broken archive is removed again.
    """
    extension = get_extension(archive_file)
    if extension == "jar" and not include_modules:
        return False
    if not is_archive(archive_file):
        return False

    created = not os.path.exists(target_dir)
    os.makedirs(target_dir, exist_ok=True)
    try:
        if extension in ZIP_EXTENSIONS:
            decompress_zip_file(archive_file, target_dir)
        elif extension in GZIP_EXTENSIONS:
            decompress_gzip_file(archive_file, target_dir)
        else:
            extract_tar_file(archive_file, target_dir, TAR_MODES[extension])
        return True
    except (zipfile.BadZipFile, tarfile.TarError, gzip.BadGzipFile, UnsafeArchiveError, OSError, EOFError) as e:
        logger.error(f"Cannot unpack {archive_file}: {e}")
        if created:
            shutil.rmtree(target_dir, ignore_errors=True)
        return False


def create_extract_dir() -> str:
    config = ConfigManager()
    extract_dir = pathlib.Path(config.get("scan", "extract_dir", tempfile.gettempdir()))
    extract_dir.mkdir(parents=True, exist_ok=True)
    prefix = config.get("scan", "extract_prefix", "inventorykit-scan-")
    temp_dir = tempfile.mkdtemp(prefix=prefix, dir=extract_dir)
    EXTRACT_DIRS.append(temp_dir)
    return temp_dir


def delete_extract_dirs() -> None:
    while EXTRACT_DIRS:
        temp_dir = EXTRACT_DIRS.pop()
        if os.path.exists(temp_dir):
            shutil.rmtree(temp_dir, ignore_errors=True)
            logger.info(f"Cleaned up temporary directory: {temp_dir}")


@atexit.register
def cleanup_hook():
    """Remove temporary scan directories left over at exit."""
    delete_extract_dirs()
