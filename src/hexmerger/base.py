# Copyright (c) 2020-2023, Andrea Zoppi.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Common stuff, shared across modules."""

import dataclasses
import enum
import logging
from typing import Any
from typing import Optional

from bytesparse.base import Address
from bytesparse.base import BlockList
from bytesparse.base import ClosedInterval
from bytesparse.base import Value

try:
    from typing import TypeAlias
except ImportError:  # pragma: no cover
    TypeAlias = Any  # Python < 3.10

__all__ = [
    'ADDRESS_MAX',
    'Address',
    'AddressRangeError',
    'ArgumentError',
    'BUFFER_MARGIN',
    'BUFFER_MAX',
    'BlockList',
    'ChecksumError',
    'ClosedInterval',
    'DEFAULT_SETTINGS',
    'DecodeError',
    'ENTRY_SIZE',
    'EncodeError',
    'FileAccessError',
    'HexMergerError',
    'ImageSizeError',
    'Index',
    'RecordError',
    'ResourceError',
    'Settings',
    'UnsupportedFormatError',
    'Value',
    'Verbosity',
]

Index: TypeAlias = int

ADDRESS_MAX: Address = 0xFFFFFFFFFFFFFFFF
r"""Highest address storable within a memory image (64-bit)."""

BUFFER_MARGIN: float = 1.3
r"""Grow/shrink factor of the memory image backing storage. Must be > 1."""

BUFFER_MAX: int = 50 * 1024 * 1024
r"""Maximum size of the memory image backing storage, in bytes."""

ENTRY_SIZE: int = 8 + 1
r"""Backing storage bytes per entry: 64-bit address plus data byte."""


class Verbosity(enum.IntEnum):
    r"""Message verbosity levels."""

    MUTE = 0
    r"""No messages at all."""

    SILENT = 1
    r"""Operation names only."""

    INFORM = 2
    r"""Operation names and sizes."""

    CHATTY = 3
    r"""Everything, including address ranges."""

    @property
    def log_level(self) -> int:
        r"""Logging level used for messages enabled by this verbosity."""

        if self >= Verbosity.CHATTY:
            return logging.DEBUG
        return logging.INFO


@dataclasses.dataclass(frozen=True)
class Settings:
    r"""Request-scoped configuration.

    Passed explicitly to file-level and range operations, in place of any
    process-wide state.

    Attributes:
        verbosity (:obj:`Verbosity`):
            Message verbosity; :attr:`Verbosity.MUTE` disables messages.
    """

    verbosity: Verbosity = Verbosity.INFORM

    def __post_init__(self):
        object.__setattr__(self, 'verbosity', Verbosity(self.verbosity))

    def log(
        self,
        logger: logging.Logger,
        verbosity: Verbosity,
        msg: str,
        *args: Any,
    ) -> None:
        r"""Logs a message, if enabled by the current verbosity.

        Arguments:
            logger (:obj:`logging.Logger`):
                Target logger.

            verbosity (:obj:`Verbosity`):
                Minimum verbosity required to emit the message.

            msg (str):
                Message format string, see :meth:`logging.Logger.log`.

            args:
                Message format arguments.
        """

        if self.verbosity and self.verbosity >= verbosity:
            logger.log(verbosity.log_level, msg, *args)


DEFAULT_SETTINGS = Settings()


class HexMergerError(Exception):
    r"""Base class of all the errors raised by this package."""


class DecodeError(HexMergerError, ValueError):
    r"""Input data cannot be decoded.

    Arguments:
        message (str):
            Description of the failing construct.

        filename (str):
            Name of the decoded file, if any.

        line (int):
            One-based number of the offending line, if any.
    """

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        line: Optional[int] = None,
    ):

        self.message = message
        self.filename = filename
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.filename is not None:
            location.append(f'file {self.filename!r}')
        if self.line is not None:
            location.append(f'line {self.line}')
        if location:
            return f'{", ".join(location)}: {self.message}'
        return self.message


class RecordError(DecodeError):
    r"""Malformed record, unsupported record type, or invalid token."""


class ChecksumError(DecodeError):
    r"""Record checksum mismatch.

    Arguments:
        expected (int):
            Checksum computed over the record contents.

        actual (int):
            Checksum read from the record.

        filename (str):
            Name of the decoded file, if any.

        line (int):
            One-based number of the offending line, if any.
    """

    def __init__(
        self,
        expected: int,
        actual: int,
        filename: Optional[str] = None,
        line: Optional[int] = None,
    ):

        self.expected = expected
        self.actual = actual
        message = f'checksum error (read 0x{actual:02X}, calc 0x{expected:02X})'
        super().__init__(message, filename=filename, line=line)


class EncodeError(HexMergerError, ValueError):
    r"""Memory image cannot be represented by the target format."""


class ArgumentError(HexMergerError, ValueError):
    r"""Invalid argument."""


class AddressRangeError(ArgumentError):
    r"""Address window with start address higher than end address.

    Arguments:
        start (int):
            Start address of the window (inclusive).

        end (int):
            End address of the window (inclusive).
    """

    def __init__(
        self,
        start: Address,
        end: Address,
    ):

        self.start = start
        self.end = end
        super().__init__(f'start address 0x{start:X} higher than end address 0x{end:X}')


class UnsupportedFormatError(ArgumentError):
    r"""Unknown file format or file extension."""


class ResourceError(HexMergerError):
    r"""Resource failure."""


class ImageSizeError(ResourceError, MemoryError):
    r"""Memory image backing storage would exceed its size guard."""


class FileAccessError(ResourceError, OSError):
    r"""File cannot be opened or created."""


def check_window(
    start: Address,
    end: Address,
) -> None:
    r"""Checks an inclusive address window.

    Arguments:
        start (int):
            Start address (inclusive).

        end (int):
            End address (inclusive).

    Raises:
        :obj:`AddressRangeError`: `start` is higher than `end`.

        :obj:`ValueError`: Address outside the 64-bit range.
    """

    check_address(start)
    check_address(end)
    if start > end:
        raise AddressRangeError(start, end)


def check_address(
    address: Address,
) -> None:

    if not 0 <= address <= ADDRESS_MAX:
        raise ValueError('address overflow')
