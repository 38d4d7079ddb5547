"""Terminal styling for listing spans.

Styling is a pure function of the semantic tag, the user's enablement flag
and a terminal check; nothing here looks at a global stream.
"""
from typing import Callable

from rich.color import ColorSystem
from rich.style import Style

STYLES = {
    "header": Style.parse("bold white on black"),
    "title": Style.parse("bold white on black"),
    "legend": Style.parse("bold magenta"),
    "opcode": Style.parse("bold cyan"),
    "location": Style.parse("green"),
    "address": Style.parse("yellow"),
    "symbol": Style.parse("underline"),
}

Colorizer = Callable[[str, str], str]


def style_span(tag: str, text: str, enabled: bool, isatty: Callable[[], bool]) -> str:
    """Wrap *text* in the escape sequence for *tag* when colour is allowed."""
    if not enabled or not isatty():
        return text
    style = STYLES.get(tag)
    if style is None:
        return text
    return style.render(text, color_system=ColorSystem.STANDARD)


def make_colorizer(enabled: bool, isatty: Callable[[], bool]) -> Colorizer:
    def colorize(tag: str, text: str) -> str:
        return style_span(tag, text, enabled, isatty)

    return colorize


def plain(tag: str, text: str) -> str:
    return text
