import logging
import os

from vmigrate.exceptions import EmptyInputError, InputFileNotFoundError

logger = logging.getLogger('vmigrate')


def parse_lines(lines):
    """
    Trim every line and drop blanks and '#' comments.
    Order and duplicates are kept.
    """
    entries = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith('#'):
            continue
        entries.append(entry)
    return entries


def load_list(path, kind="input", logger=logger):
    """
    Load a VM or host list file.

    Args:
        path: Path to a UTF-8 text file with one entry per line
        kind: Label used in log and error messages ("VM list", "Target hosts")

    Returns:
        List of entries in file order

    Raises:
        InputFileNotFoundError: the file does not exist
        EmptyInputError: the file holds no usable entries
    """
    if not os.path.isfile(path):
        raise InputFileNotFoundError(path, kind=kind)

    with open(path, 'r', encoding='utf-8') as f:
        entries = parse_lines(f)

    if not entries:
        raise EmptyInputError(path, kind=kind)

    logger.debug(f"[InputLoader] Loaded {len(entries)} entries from {kind} file '{path}'")
    return entries
