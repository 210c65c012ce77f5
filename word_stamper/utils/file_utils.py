"""
File utility functions for Word Stamper.
"""
import os
from typing import Tuple


def check_file_writeable(filepath: str) -> Tuple[bool, str]:
    """
    Check if a file can be written to.

    Args:
        filepath: Path to the file

    Returns:
        Tuple of (is_writeable, error_message)
    """
    if not os.path.exists(filepath):
        directory = os.path.dirname(os.path.abspath(filepath))
        if not os.access(directory, os.W_OK):
            return False, f"Cannot create file in directory {directory}"
        return True, ""

    if not os.access(filepath, os.W_OK):
        return False, f"File {filepath} is not writeable"

    # Word keeps an exclusive handle on open documents
    try:
        with open(filepath, 'a'):
            pass
    except IOError as e:
        return False, f"File {filepath} is locked: {str(e)}"

    return True, ""


def ensure_docx_extension(filename: str) -> str:
    """
    Ensure filename has .docx extension.

    Args:
        filename: The filename to check

    Returns:
        Filename with .docx extension
    """
    if not filename.endswith('.docx'):
        return filename + '.docx'
    return filename
