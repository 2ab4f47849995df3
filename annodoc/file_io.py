"""
Reading sources, writing help files, and default input discovery.
"""

import functools
import os
from pathlib import Path
from typing import List, Optional, Union

from .constants import (
    DEFAULT_INPUT_GLOBS,
    DEFAULT_OUTPUT_TEMPLATE,
    INIT_FILE_NAME,
    SOURCE_FILE_PATTERN,
)
from .exceptions import DestinationWriteError, SourceReadError
from .utils import logger


def read_lines(path: Union[str, Path]) -> List[str]:
    """Read file lines (split on line breaks).

    Raises:
        SourceReadError: If file can't be opened or decoded
    """
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(path, e) from e

    return contents.split('\n')


def write_lines(path: Union[str, Path], lines: List[str]):
    """Write lines as new file contents, creating parent directories.

    Lines are separated with a line break, without one after the last line.

    Raises:
        DestinationWriteError: If directory or file can't be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'wb') as f:
            f.write('\n'.join(lines).encode('utf-8'))
    except OSError as e:
        raise DestinationWriteError(path, e) from e

    logger.debug(f"Wrote {len(lines)} lines to {path}")


def _compare_paths(a: str, b: str) -> int:
    # Init file goes first among files of the same directory
    if os.path.dirname(a) == os.path.dirname(b):
        if os.path.basename(a) == INIT_FILE_NAME:
            return -1
        if os.path.basename(b) == INIT_FILE_NAME:
            return 1
    return (a > b) - (a < b)


def default_input(root: Optional[Union[str, Path]] = None) -> List[str]:
    """Source files to use when no input is given.

    Directories are scanned in order: root itself, then recursively `lua/`,
    `after/`, and `colors/`. Files of each scan are sorted with init file
    first within its directory, then by path.

    Returns:
        List of absolute paths
    """
    root = Path(root) if root is not None else Path.cwd()
    result: List[str] = []

    for dir_glob in DEFAULT_INPUT_GLOBS:
        if dir_glob == '.':
            pattern = SOURCE_FILE_PATTERN
        else:
            pattern = f"{dir_glob}/{SOURCE_FILE_PATTERN}"

        files = [
            os.path.abspath(str(p))
            for p in root.glob(pattern)
            if p.is_file()
        ]
        files.sort(key=functools.cmp_to_key(_compare_paths))
        result.extend(files)

    logger.debug(f"Found {len(result)} input files in {root}")
    return result


def default_output(root: Optional[Union[str, Path]] = None) -> str:
    """Output path based on name of the current directory."""
    root = Path(root) if root is not None else Path.cwd()
    return DEFAULT_OUTPUT_TEMPLATE.format(name=Path(root.resolve().name).stem)
