"""
Trade feed connector - reading and classifying feed lines.

The whole feed is buffered by a single read step and handed to the
pipeline as an immutable tuple of ``FeedLine`` values. Classification
only looks at the 5-character tag; decoding happens later.
"""

import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from tradefeed.core.errors import SourceError, SourceNotFoundError
from tradefeed.feed.schema import RecordTag

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class FeedLine:
    """One raw feed line with its 0-based position and tag."""

    index: int
    text: str
    tag: RecordTag


FeedLines = tuple[FeedLine, ...]


def classify_lines(lines: list[str]) -> FeedLines:
    """Attach index and tag to raw lines (terminators already stripped)."""
    return tuple(FeedLine(i, text, RecordTag.classify(text)) for i, text in enumerate(lines))


def parse_feed_content(content: str) -> FeedLines:
    """
    Split feed content into classified lines.

    Useful for tests and in-memory feeds. A trailing newline does not
    produce an extra empty line.
    """
    lines = _LINE_BREAK.split(content)
    if lines and lines[-1] == "":
        lines.pop()
    return classify_lines(lines)


def read_feed(path: str | Path, encoding: str = "utf-8") -> FeedLines:
    """
    Read a feed file fully into memory.

    Raises:
        SourceNotFoundError: the path does not exist
        SourceError: the file cannot be read or decoded
    """
    path = Path(path)
    if not path.is_file():
        raise SourceNotFoundError(str(path))
    try:
        content = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Cannot read feed {path}: {e}", cause=e).with_context(
            source_path=str(path)
        )
    return parse_feed_content(content)


def count_tags(lines: FeedLines) -> dict[RecordTag, int]:
    """Number of lines per tag (every tag present, zero if absent)."""
    counts = Counter(line.tag for line in lines)
    return {tag: counts.get(tag, 0) for tag in RecordTag}


__all__ = [
    "FeedLine",
    "FeedLines",
    "classify_lines",
    "parse_feed_content",
    "read_feed",
    "count_tags",
]
