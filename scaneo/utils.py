"""Utility functions for locating Go source files.

Expands the paths given on the command line into the ordered list of files
the extractor should read.
"""

from pathlib import Path
from typing import Iterable, List, Union

from .logging_config import get_logger

logger = get_logger(__name__)

GENERATED_MARKER = "generated by scaneo"


def is_generated_file(file_path: Union[str, Path]) -> bool:
    """Check whether a Go file was written by scaneo.

    Args:
        file_path: Path to a Go source file.

    Returns:
        True if the first line carries the scaneo marker.
    """
    try:
        with Path(file_path).open("r", encoding="utf-8", errors="replace") as f:
            first_line = f.readline()
    except OSError as e:
        logger.warning("Could not read %s: %s", file_path, e)
        return False
    return GENERATED_MARKER in first_line


def _dir_go_files(directory: Path) -> List[Path]:
    files = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or entry.suffix != ".go":
            continue
        if entry.name.endswith("_test.go"):
            logger.info("Skipping test file: %s", entry)
            continue
        if is_generated_file(entry):
            logger.info("Skipping generated file: %s", entry)
            continue
        files.append(entry)
    return files


def filenames(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """Expand input paths into Go source files.

    Directories contribute their own ``.go`` files (not recursive), minus
    ``_test.go`` files and scaneo output. Files are taken as given. Each
    file appears once, at its first position.

    Args:
        paths: Files and directories; empty means the current directory.

    Returns:
        Ordered list of file paths.

    Raises:
        FileNotFoundError: If a path doesn't exist.
    """
    paths = list(paths) or ["."]

    seen = set()
    files: List[Path] = []

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            logger.error("Path not found: %s", path)
            raise FileNotFoundError(f"Path not found: {path}")

        candidates = _dir_go_files(path) if path.is_dir() else [path]
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(candidate)

    logger.debug("Resolved %d file(s) from %d path(s)", len(files), len(paths))
    return files
