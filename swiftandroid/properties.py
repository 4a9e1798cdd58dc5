#
# Copyright (C) 2026 The swift-android Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Reads and updates local.properties files.

One entry per line in the Java properties format: the key ends at the first
unescaped `=`, `:` or whitespace, `#` and `!` start comments, and backslash
escapes include `\\uXXXX`. Trailing whitespace is part of the value. Line
continuations are not supported; Android Studio never writes them.
"""
from __future__ import annotations

import logging
from pathlib import Path
import string
from typing import Dict, List, Mapping, Optional, Tuple

from swiftandroid.errors import ConfigurationError

_WHITESPACE = ' \t\f'
_SEPARATORS = '=:'


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


def unescape(value: str) -> str:
    """Removes properties-file escaping from a key or value.

    Android Studio escapes Windows paths, e.g. `C\\:\\\\sdk` for `C:\\sdk`.

    Raises:
        ConfigurationError: A `\\u` escape is not followed by four hex digits.
    """
    chars: List[str] = []
    idx = 0
    while idx < len(value):
        char = value[idx]
        idx += 1
        if char != '\\':
            chars.append(char)
            continue
        if idx == len(value):
            break
        char = value[idx]
        idx += 1
        if char == 'u':
            digits = value[idx:idx + 4]
            if len(digits) != 4 or not all(c in string.hexdigits
                                           for c in digits):
                raise ConfigurationError(
                    f'Malformed \\uxxxx escape in {value!r}')
            chars.append(chr(int(digits, 16)))
            idx += 4
        else:
            chars.append({'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}.get(
                char, char))
    return ''.join(chars)


def escape(value: str) -> str:
    """Escapes a value so it can be written to a properties file."""
    escaped = value.replace('\\', '\\\\').replace(':', '\\:').replace(
        '=', '\\=')
    if escaped and escaped[0] in _WHITESPACE:
        # Leading whitespace would be taken as part of the separator.
        escaped = '\\' + escaped
    return escaped


def _split_entry(line: str) -> Optional[Tuple[str, str]]:
    """Splits a properties line into a raw (key, value) pair.

    Returns None for blank lines and comments.
    """
    stripped = line.lstrip(_WHITESPACE)
    if not stripped or stripped[0] in '#!':
        return None
    escaped = False
    for idx, char in enumerate(stripped):
        if escaped:
            escaped = False
            continue
        if char == '\\':
            escaped = True
        elif char in _SEPARATORS or char in _WHITESPACE:
            rest = stripped[idx:].lstrip(_WHITESPACE)
            if rest[:1] and rest[0] in _SEPARATORS:
                rest = rest[1:].lstrip(_WHITESPACE)
            return stripped[:idx], rest
    return stripped, ''


def parse(text: str) -> Dict[str, str]:
    """Parses the contents of a properties file."""
    entries: Dict[str, str] = {}
    for line in text.splitlines():
        entry = _split_entry(line)
        if entry is None:
            continue
        key, value = entry
        entries[unescape(key)] = unescape(value)
    return entries


def load(path: Path) -> Dict[str, str]:
    """Loads a properties file.

    A missing file is treated as an empty one since local.properties is not
    checked in and might not have been created yet.
    """
    if not path.exists():
        logger().debug('%s does not exist', path)
        return {}
    return parse(path.read_text(encoding='utf-8'))


def update(path: Path, values: Mapping[str, str]) -> None:
    """Writes the given entries to a properties file.

    Existing entries for the given keys are replaced in place. Other lines,
    including comments, are preserved. Keys that were not present are appended.
    """
    lines: List[str] = []
    if path.exists():
        lines = path.read_text(encoding='utf-8').splitlines()

    pending = dict(values)
    for idx, line in enumerate(lines):
        entry = _split_entry(line)
        if entry is None:
            continue
        key = unescape(entry[0])
        if key in pending:
            lines[idx] = f'{key}={escape(pending.pop(key))}'
    for key, value in pending.items():
        lines.append(f'{key}={escape(value)}')

    logger().info('Updating %s', path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
