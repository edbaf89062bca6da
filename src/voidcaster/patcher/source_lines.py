"""Fetches source lines and renders the before/after views shown by the
interactive prompt. Columns are byte columns, as reported by the front end."""

# System
from typing import Optional

# Voidcaster
from voidcaster.commons.models import SourceLocation
from voidcaster.logger import setup_logger

logger = setup_logger(__name__)


def fetch_file_lines(file_path: str, first_line: int, count: int = 1) -> Optional[bytes]:
    """
    Returns `count` lines of `file_path` starting at the 1-based `first_line`,
    without the terminator of the last one. Returns None if the file can't be
    read or the line lies past the end of the file.
    """
    if first_line < 1 or count < 1:
        raise ValueError("lines are numbered from 1 and at least one must be fetched")

    try:
        with open(file_path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.error("%s: %s", file_path, e.strerror)
        return None

    lines = data.split(b"\n")
    if data.endswith(b"\n"):
        # the terminator of the last line does not start a new one
        lines.pop()
    if first_line > max(len(lines), 1):
        logger.error("Line %d past end of source file %s.", first_line, file_path)
        return None

    return b"\n".join(lines[first_line - 1:first_line - 1 + count])


def offset_in_block(block: bytes, first_line: int, location: SourceLocation) -> int:
    """Byte offset of `location` inside a block of lines starting at `first_line`."""
    line_starts = [0]
    for index, byte in enumerate(block):
        if byte == 0x0A:
            line_starts.append(index + 1)

    line_index = location.line - first_line
    if line_index < 0:
        return 0
    if line_index >= len(line_starts):
        return len(block)
    return min(line_starts[line_index] + location.column - 1, len(block))


def preview_insert(line: bytes, column: int, text: str) -> str:
    """The line as it reads once `text` is inserted before `column`."""
    split_at = column - 1
    return (line[:split_at] + text.encode("utf-8") + line[split_at:]).decode("utf-8", errors="replace")


def preview_remove(block: bytes, first_line: int,
                   start: SourceLocation, end: SourceLocation) -> str:
    """The lines as they read once everything from `start` up to `end` is dropped."""
    start_offset = offset_in_block(block, first_line, start)
    end_offset = offset_in_block(block, first_line, end)
    return (block[:start_offset] + block[end_offset:]).decode("utf-8", errors="replace")


def as_text(block: Optional[bytes]) -> str:
    return block.decode("utf-8", errors="replace") if block else ""
