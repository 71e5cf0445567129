from __future__ import annotations

import re
from typing import Literal

_IDENTIFIER_SINGLE_ESCAPE = re.compile(r"[ -,./:-@\[\]^`{-~]")
_LEADING_HYPHEN = re.compile(r"^-[-0-9]")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_EXCESSIVE_SPACES = re.compile(r"(^|\\+)?(\\[A-F0-9]{1,6})\x20(?![a-fA-F0-9\x20])")


def escape_css(
    value: str,
    *,
    is_identifier: bool = False,
    quotes: Literal["single", "double"] = "single",
    wrap: bool = False,
) -> str:
    """Escape ``value`` for embedding in a CSS selector.

    Identifier mode escapes punctuation and fixes leading digits and
    ``-digit`` prefixes. String mode only escapes backslashes and the active
    quote character. Both modes write non-printable and non-ASCII code points,
    and any hex digit that follows a backslash, as ``\\HEX `` escapes.
    """
    quote = '"' if quotes == "double" else "'"
    output: list[str] = []
    position = 0
    length = len(value)
    after_backslash = False
    while position < length:
        char = value[position]
        position += 1
        code_point = ord(char)
        if code_point < 0x20 or code_point > 0x7E:
            if 0xD800 <= code_point <= 0xDBFF and position < length:
                low = ord(value[position])
                if 0xDC00 <= low <= 0xDFFF:
                    code_point = ((code_point & 0x3FF) << 10) + (low & 0x3FF) + 0x10000
                    position += 1
            output.append(f"\\{code_point:X} ")
        elif char == "\\":
            output.append("\\\\")
        elif after_backslash and char in _HEX_DIGITS:
            # "\\" followed by a hex digit reads as a code point escape in cssselect.
            output.append(f"\\{code_point:X} ")
        elif is_identifier and _IDENTIFIER_SINGLE_ESCAPE.match(char):
            output.append("\\" + char)
        elif not is_identifier and char == quote:
            output.append("\\" + char)
        else:
            output.append(char)
        after_backslash = char == "\\"

    escaped = "".join(output)
    if is_identifier and value:
        if escaped == "-":
            escaped = "\\-"
        elif _LEADING_HYPHEN.match(escaped):
            escaped = "\\-" + escaped[1:]
        elif value[0] in "0123456789":
            escaped = f"\\3{value[0]} " + escaped[1:]

    escaped = _EXCESSIVE_SPACES.sub(_trim_escape_space, escaped)
    if wrap and not is_identifier:
        return f"{quote}{escaped}{quote}"
    return escaped


def escape_css_identifier(value: str) -> str:
    return escape_css(value, is_identifier=True)


def escape_css_string(value: str) -> str:
    return escape_css(value, quotes="double")


def _trim_escape_space(match: re.Match[str]) -> str:
    backslashes = match.group(1)
    # An odd run of backslashes means the hex escape is itself escaped text.
    if backslashes and len(backslashes) % 2:
        return match.group(0)
    return (backslashes or "") + match.group(2)
