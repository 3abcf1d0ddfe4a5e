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

r"""Checksum routines over memory image index ranges.

Both the data integrity reports and the record formats rely on these
routines. All of them are pure functions: the memory image is never altered.

Checksums are computed over the data bytes of the selected entries, in
ascending address order. If :data:`CHECKSUM_INCLUDE_ADDRESS` is enabled, the
8 little-endian address bytes of each entry precede its data byte.
"""

import zlib
from typing import Iterable
from typing import Optional

from .base import Index

CHECKSUM_INCLUDE_ADDRESS: bool = False
r"""Include entry addresses within checksums (build-time policy)."""


def crc32_update(
    crc: int,
    data: bytes,
) -> int:
    r"""Updates a running CRC32-IEEE checksum.

    Arguments:
        crc (int):
            Checksum of the data fed so far; ``0`` to start.

        data (bytes):
            Data to feed.

    Returns:
        int: Updated checksum.

    Examples:
        >>> from hexmerger.checksums import crc32_update
        >>> hex(crc32_update(crc32_update(0, b'1234'), b'56789'))
        '0xcbf43926'
    """

    return zlib.crc32(data, crc) & 0xFFFFFFFF


def fletcher16_update(
    sums: int,
    data: Iterable[int],
) -> int:
    r"""Updates a Fletcher-16 checksum.

    Arguments:
        sums (int):
            Current checksum, with the second sum in the high byte.

        data (iterable of int):
            Byte values to feed.

    Returns:
        int: Updated checksum.
    """

    sum1 = sums & 0xFF
    sum2 = (sums >> 8) & 0xFF
    for value in data:
        sum1 = (sum1 + value) % 255
        sum2 = (sum2 + sum1) % 255
    return (sum2 << 8) | sum1


def _checksum_bytes(
    image,
    idx_start: Index,
    idx_end: Index,
) -> bytes:

    if CHECKSUM_INCLUDE_ADDRESS:  # pragma: no cover
        return b''.join(address.to_bytes(8, 'little') + bytes((value,))
                        for address, value in image.entries(idx_start, idx_end))
    return image.data_slice(idx_start, idx_end)


def _resolve_indices(
    image,
    idx_start: Optional[Index],
    idx_end: Optional[Index],
):
    if idx_start is None:
        idx_start = 0
    if idx_end is None:
        idx_end = len(image) - 1
    if idx_start < 0 or idx_end >= len(image):
        raise IndexError('index out of range')
    return idx_start, idx_end


def crc32(
    image,
    idx_start: Optional[Index] = None,
    idx_end: Optional[Index] = None,
) -> int:
    r"""CRC32-IEEE over an entry index range.

    Standard reflected CRC32 (as used by Ethernet, ZIP, PNG), with register
    pre-set and final XOR at ``0xFFFFFFFF``.

    Arguments:
        image (:obj:`MemoryImage`):
            Memory image to read.

        idx_start (int):
            First entry index (inclusive). ``None`` means the first entry.

        idx_end (int):
            Last entry index (inclusive). ``None`` means the last entry.

    Returns:
        int: 32-bit checksum; ``0`` for an empty range.

    Raises:
        :obj:`IndexError`: Index outside the image entries.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.checksums import crc32
        >>> image = MemoryImage.from_bytes(b'123456789', 0x100)
        >>> hex(crc32(image))
        '0xcbf43926'
    """

    idx_start, idx_end = _resolve_indices(image, idx_start, idx_end)
    return crc32_update(0, _checksum_bytes(image, idx_start, idx_end))


def fletcher16(
    image,
    idx_start: Optional[Index] = None,
    idx_end: Optional[Index] = None,
) -> int:
    r"""Fletcher-16 over an entry index range.

    Two running sums modulo 255; the second sum is the high byte of the
    result.

    Arguments:
        image (:obj:`MemoryImage`):
            Memory image to read.

        idx_start (int):
            First entry index (inclusive). ``None`` means the first entry.

        idx_end (int):
            Last entry index (inclusive). ``None`` means the last entry.

    Returns:
        int: 16-bit checksum.

    Raises:
        :obj:`IndexError`: Index outside the image entries.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.checksums import fletcher16
        >>> image = MemoryImage.from_bytes(b'abcde')
        >>> hex(fletcher16(image))
        '0xc8f0'
    """

    idx_start, idx_end = _resolve_indices(image, idx_start, idx_end)
    return fletcher16_update(0, _checksum_bytes(image, idx_start, idx_end))
