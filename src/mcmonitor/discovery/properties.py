"""
Reader for Java-style ``.properties`` files.

Supports the subset of the format servers actually write and operators
edit by hand: ``#``/``!`` comments, ``=``/``:``/whitespace separators,
backslash line continuations and ``\\t \\n \\r \\f \\uXXXX`` escapes.
Files are decoded as ISO-8859-1, matching the Java loader.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _continues(line: str) -> bool:
    """A line continues when it ends in an odd number of backslashes."""
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    lines = iter(text.splitlines())
    for line in lines:
        line = line.lstrip(_WHITESPACE)
        if not line or line[0] in "#!":
            continue
        while _continues(line):
            line = line[:-1]
            following = next(lines, None)
            if following is None:
                break
            line += following.lstrip(_WHITESPACE)
        yield line


def _split_key_value(line: str) -> Tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest[:1] and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(value: str) -> str:
    if "\\" not in value:
        return value

    out = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\" or index + 1 >= len(value):
            out.append(char)
            index += 1
            continue
        code = value[index + 1]
        if code == "u":
            digits = value[index + 2:index + 6]
            try:
                out.append(chr(int(digits, 16)))
                index += 6
                continue
            except ValueError:
                logger.debug(f"Ignoring malformed unicode escape '\\u{digits}'")
                out.append(code)
                index += 2
                continue
        out.append(_ESCAPES.get(code, code))
        index += 2
    return "".join(out)


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse properties text into a dictionary.

    Later occurrences of a key override earlier ones.

    Examples:
        >>> parse_properties("server-port=25566\\nmotd = A\\\\u00e9 server")
        {'server-port': '25566', 'motd': 'Aé server'}
    """
    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_key_value(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def read_properties(path: Path) -> Optional[Dict[str, str]]:
    """
    Read a properties file.

    Args:
        path: Location of the file.

    Returns:
        Parsed properties, or None when the file does not exist or its
        directory cannot be searched.

    Raises:
        OSError: If the file exists but cannot be read.
    """
    try:
        exists = path.is_file()
    except PermissionError as e:
        logger.debug(f"Cannot check for {path}: {e}")
        return None
    if not exists:
        return None
    return parse_properties(path.read_text(encoding="iso-8859-1"))
