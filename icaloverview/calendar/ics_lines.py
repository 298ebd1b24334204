"""Line unfolding for ICS calendar text."""

import re

_LINE_BREAK = re.compile(r"\r?\n")


def unfold_lines(text: str) -> list[str]:
    """Reverse ICS line folding into logical property lines.

    A physical line starting with a space or horizontal tab continues the
    previous logical line; exactly one leading whitespace character is
    stripped before appending. Empty physical lines are dropped, and a
    continuation with nothing before it is discarded.

    Args:
        text: Raw ICS text using CRLF or LF line breaks

    Returns:
        Logical lines in file order
    """
    lines: list[str] = []
    for raw_line in _LINE_BREAK.split(text):
        if not raw_line:
            continue
        if raw_line[0] in (" ", "\t"):
            if lines:
                lines[-1] += raw_line[1:]
            continue
        lines.append(raw_line)
    return lines
