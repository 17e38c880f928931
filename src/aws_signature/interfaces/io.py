# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Protocol, runtime_checkable


@runtime_checkable
class Seekable(Protocol):
    """A file-like object with seek and tell implemented.

    Seekable bodies are rewound after hashing instead of being buffered.
    """

    def seek(self, offset: int, whence: int = 0, /) -> int: ...

    def tell(self) -> int: ...
