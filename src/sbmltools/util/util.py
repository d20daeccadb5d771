"""General utilities used across the package."""

import hashlib
import re
from pathlib import Path
from typing import Union

from depinfo import print_dependencies


__all__ = (
    "md5_checksum",
    "name_without_extension",
    "convert_to_display_name",
    "name_to_sid",
    "show_versions",
)


CSV_EXTENSION = ".csv"

_non_sid_characters = re.compile(r"[^0-9_a-zA-Z]")


def md5_checksum(path: Union[str, Path], chunk_size: int = 4096) -> str:
    """Compute the MD5 digest of a file.

    Parameters
    ----------
    path : str or pathlib.Path
        The file to digest.
    chunk_size : int, optional
        The number of bytes read at once (default 4096).

    Returns
    -------
    str
        The hexadecimal digest.

    """
    digest = hashlib.md5()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def name_without_extension(path: Union[str, Path]) -> str:
    """Return the file name of `path` without its last extension."""
    return Path(path).stem


def convert_to_display_name(descriptor: str) -> str:
    """Turn a file descriptor into a human readable name.

    Underscores become blanks, a leading slash and a trailing ".csv"
    extension are removed.

    Parameters
    ----------
    descriptor : str
        A file name like descriptor, e.g., "liver_tissue.csv".

    Returns
    -------
    str
        The display name, e.g., "liver tissue".

    """
    descriptor = descriptor.replace("_", " ")
    if descriptor.startswith("/"):
        descriptor = descriptor[1:]
    if descriptor.lower().endswith(CSV_EXTENSION):
        descriptor = descriptor[: -len(CSV_EXTENSION)]
    return descriptor


def name_to_sid(name: str) -> str:
    """Derive a valid SBML SId from a free text name.

    Parameters
    ----------
    name : str
        Any text, e.g., a model name.

    Returns
    -------
    str
        The text with all characters not allowed in an SId replaced by
        underscores, prefixed by an underscore if it would start with a
        digit.

    """
    sid = _non_sid_characters.sub("_", name.strip())
    if not sid or sid[0].isdigit():
        sid = "_" + sid
    return sid


def show_versions() -> None:
    """Print dependency information."""
    print_dependencies("sbmltools")
