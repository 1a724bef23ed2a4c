"""Line-ending and blank-line normalization for extracted chapter text."""

import re

_LINE_BREAKS = re.compile(r"\r\n|\r|\u2028|\u2029")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Canonicalize line breaks and blank lines.

    Idempotent: normalize_text(normalize_text(x)) == normalize_text(x).
    """
    text = _LINE_BREAKS.sub("\n", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip("\n")


def clean_text(text, should_clean=True):
    """Apply normalize_text when cleaning is enabled and there is text."""
    if not text or not should_clean:
        return text
    return normalize_text(text)
