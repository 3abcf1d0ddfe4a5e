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

r"""Generic utility functions."""

import binascii
import logging
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

from .base import Address
from .base import RecordError
from .base import Settings
from .base import Verbosity

AnyText = Union[bytes, bytearray, memoryview, str]

LINE_SIZE_MAX: int = 32
r"""Maximum data bytes per record line, also their address alignment."""


def hexlify(
    data: bytes,
) -> bytes:
    r"""Upper-case hexadecimal representation of some data.

    Examples:
        >>> from hexmerger.utils import hexlify
        >>> hexlify(b'\x12\xab')
        b'12AB'
    """

    return binascii.hexlify(data).upper()


def unhexlify(
    hexstr: bytes,
) -> bytes:
    r"""Converts a hexadecimal representation into data."""

    return binascii.unhexlify(hexstr)


def iter_lines(
    data: AnyText,
) -> Iterator[Tuple[int, bytes]]:
    r"""Iterates over the text lines of some data.

    Trailing whitespace (line terminators included) is stripped; blank lines
    are skipped.

    Arguments:
        data (bytes):
            Text data; :obj:`str` is encoded as ASCII.

    Yields:
        pair: One-based line number and stripped line contents.
    """

    if isinstance(data, str):
        data = data.encode('ascii', errors='replace')
    for lineno, line in enumerate(bytes(data).splitlines(), 1):
        line = line.rstrip()
        if line:
            yield lineno, line


def unhexlify_line(
    payload: bytes,
    filename: Optional[str],
    lineno: int,
) -> bytes:
    r"""Converts the hexadecimal payload of a record line.

    Raises:
        :obj:`RecordError`: Odd size or invalid hexadecimal digits.
    """

    try:
        return unhexlify(payload)
    except binascii.Error as exc:
        raise RecordError('invalid hexadecimal data', filename=filename, line=lineno) from exc


def iter_chunks(
    image,
    size: int = LINE_SIZE_MAX,
) -> Iterator[Tuple[Address, bytes]]:
    r"""Iterates over record-sized chunks of a memory image.

    Each chunk holds consecutive bytes only, at most `size` of them, and
    never crosses an address multiple of `size`.

    Arguments:
        image (:obj:`MemoryImage`):
            Memory image to split.

        size (int):
            Maximum chunk size, also chunk alignment.

    Yields:
        pair: Start address and data of each chunk.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.utils import iter_chunks
        >>> image = MemoryImage.from_blocks([[6, b'ABCDEF'], [16, b'xyz']])
        >>> list(iter_chunks(image, 4))
        [(6, b'AB'), (8, b'CDEF'), (16, b'xyz')]
    """

    for idx_start, idx_end in image.blocks():
        address = image.entry(idx_start)[0]
        index = idx_start
        while index <= idx_end:
            chunk_end = min(idx_end, index + (size - 1 - (address % size)))
            yield address, image.data_slice(index, chunk_end)
            address += chunk_end - index + 1
            index = chunk_end + 1


def format_size(
    count: int,
) -> str:
    r"""Human readable byte count.

    Examples:
        >>> from hexmerger.utils import format_size
        >>> format_size(0), format_size(100), format_size(2048), format_size(3 << 20)
        ('no data', '100B', '2.0kB', '3.0MB')
    """

    if count > 1024 * 1024:
        return f'{count / 1024 / 1024:1.1f}MB'
    elif count > 1024:
        return f'{count / 1024:1.1f}kB'
    elif count > 0:
        return f'{count}B'
    else:
        return 'no data'


def report(
    logger: logging.Logger,
    settings: Settings,
    action: str,
    count: int,
    start: Optional[Address] = None,
    end: Optional[Address] = None,
) -> None:
    r"""Reports the outcome of an operation, as per verbosity.

    Arguments:
        logger (:obj:`logging.Logger`):
            Target logger.

        settings (:obj:`Settings`):
            Current settings.

        action (str):
            Short operation description.

        count (int):
            Number of processed bytes.

        start (int):
            Start address of the processed window, if meaningful.

        end (int):
            End address of the processed window, if meaningful.
    """

    verbosity = settings.verbosity
    if verbosity >= Verbosity.CHATTY and count and start is not None and end is not None:
        settings.log(logger, Verbosity.CHATTY, '%s done (%s in [0x%X; 0x%X])',
                     action, format_size(count), start, end)
    elif verbosity >= Verbosity.INFORM:
        settings.log(logger, Verbosity.INFORM, '%s done (%s)', action, format_size(count))
    else:
        settings.log(logger, Verbosity.SILENT, '%s done', action)
