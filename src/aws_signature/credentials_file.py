# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Reading and writing the multi-profile shared credentials file.

The file is a sequence of ``[profile-name]`` sections, each followed by
``KEY = VALUE`` lines::

    [default]
    aws_access_key_id = AKIDEXAMPLE
    aws_secret_access_key = wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY

Keys are case-insensitive and stored upper-cased. Values keep their case.
"""

import logging
import os
from collections.abc import Iterator, Mapping
from enum import Enum, auto
from pathlib import Path
from types import MappingProxyType
from typing import Final

from .config import CredentialsConfig
from .exceptions import CredentialsFileNotFoundError, ParseError

logger: Final = logging.getLogger(__name__)

_COMMENT_PREFIXES = ("#", ";")


class CredentialStore(Mapping[str, Mapping[str, str]]):
    """Read-only, ordered mapping of profile name to that profile's keys."""

    def __init__(self, profiles: Mapping[str, Mapping[str, str]]):
        self._profiles: dict[str, Mapping[str, str]] = {
            name: MappingProxyType(dict(values)) for name, values in profiles.items()
        }

    def __getitem__(self, name: str) -> Mapping[str, str]:
        return self._profiles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CredentialStore):
            return False
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"CredentialStore(profiles={list(self._profiles)!r})"

    def to_text(self) -> str:
        return serialize_credentials(self)


class _ScanState(Enum):
    OUTSIDE_SECTION = auto()
    INSIDE_SECTION = auto()


def _section_name(line: str) -> str | None:
    if line.startswith("[") and line.endswith("]"):
        return line[1:-1].strip()
    return None


def parse_credentials(text: str) -> CredentialStore:
    """Parse the text of a credentials file into a :py:class:`CredentialStore`.

    :param text: Raw contents of the credentials file.
    :raises ParseError: If the text contains no section header, a section header
        has no name, content appears before the first section, or a line inside a
        section is not a ``KEY = VALUE`` pair.
    """
    profiles: dict[str, dict[str, str]] = {}
    state = _ScanState.OUTSIDE_SECTION
    current: dict[str, str] = {}

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue

        name = _section_name(line)
        if name is not None:
            if not name:
                raise ParseError("Empty profile name.", line_number=line_number)
            # A repeated section continues the earlier profile.
            current = profiles.setdefault(name, {})
            state = _ScanState.INSIDE_SECTION
            continue

        if state is _ScanState.OUTSIDE_SECTION:
            raise ParseError(
                "Found a key/value pair before any [profile] section.",
                line_number=line_number,
            )

        key, sep, value = line.partition("=")
        key = key.strip().upper()
        if not sep or not key:
            raise ParseError(
                f"Expected a 'KEY = VALUE' pair, got {raw_line!r}.",
                line_number=line_number,
            )
        current[key] = value.strip()

    if state is _ScanState.OUTSIDE_SECTION:
        raise ParseError("No [profile] section headers were found.")

    return CredentialStore(profiles)


def serialize_credentials(store: Mapping[str, Mapping[str, str]]) -> str:
    """Render profiles back into credentials file text."""
    sections: list[str] = []
    for name, values in store.items():
        lines = [f"[{name}]"]
        lines.extend(f"{key} = {value}" for key, value in values.items())
        sections.append("\n".join(lines))
    return "\n\n".join(sections) + "\n"


def read_credentials(
    path: str | os.PathLike[str] | None = None,
    *,
    config: CredentialsConfig | None = None,
) -> CredentialStore:
    """Read and parse a credentials file from disk.

    :param path: Location of the file. When omitted the
        ``AWS_SHARED_CREDENTIALS_FILE`` override or the default home-relative
        location is used.
    :param config: Settings to resolve the default location from.
    :raises CredentialsFileNotFoundError: If there is no file at the path.
    :raises ParseError: If the file is malformed.
    """
    if path is None:
        config = config or CredentialsConfig()
        file_path = config.shared_credentials_file
    else:
        file_path = Path(path).expanduser()

    if not file_path.is_file():
        raise CredentialsFileNotFoundError(f"File '{file_path}' does not exist.")

    logger.debug("Reading credentials file: %s", file_path)
    text = file_path.read_text(encoding="utf-8")
    return parse_credentials(text)
