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

r"""Motorola S-record format.

Each line is a record made of hexadecimal pairs, except for the leading
``S`` and the single-digit record type (*tag*):

``S<tag><count><address><data...><checksum>``

+-----+---------------+-------------------------------+
| Tag | Address bytes | Meaning                       |
+=====+===============+===============================+
| 0   | 2             | Header, ignored               |
+-----+---------------+-------------------------------+
| 1   | 2             | Data, 16-bit address          |
+-----+---------------+-------------------------------+
| 2   | 3             | Data, 24-bit address          |
+-----+---------------+-------------------------------+
| 3   | 4             | Data, 32-bit address          |
+-----+---------------+-------------------------------+
| 7   | 4             | Termination of S3 data        |
+-----+---------------+-------------------------------+
| 8   | 3             | Termination of S2 data        |
+-----+---------------+-------------------------------+
| 9   | 2             | Termination of S1 data        |
+-----+---------------+-------------------------------+

The byte count covers address, data, and checksum. The checksum is the
one's complement of the byte sum of count, address, and data.
"""

import re
from typing import Mapping
from typing import Optional

from ..base import ChecksumError
from ..base import EncodeError
from ..base import RecordError
from ..image import MemoryImage
from ..utils import AnyText
from ..utils import hexlify
from ..utils import iter_chunks
from ..utils import iter_lines
from ..utils import unhexlify_line

LINE_REGEX = re.compile(rb'S(?P<tag>[0-9])(?P<payload>[0-9A-Fa-f]*)')

DATA_TAGS = (1, 2, 3)

HEADER_RECORD: bytes = b'S00F000068656C6C6F202020202000003C'
r"""Dummy header record, for tools expecting one."""

TERMINATOR_RECORDS: Mapping[int, bytes] = {
    1: b'S9030000FC',
    2: b'S804000000FB',
    3: b'S70500000000FA',
}
r"""Termination record matching each data record tag."""


def compute_checksum(
    record: bytes,
) -> int:
    r"""Computes the checksum of a record.

    Arguments:
        record (bytes):
            Count, address, and data bytes.

    Returns:
        int: One's complement of the byte sum.
    """

    return 0xFF ^ (sum(record) & 0xFF)


def select_tag(
    address_max: int,
) -> int:
    r"""Selects the data record tag able to hold some address.

    Examples:
        >>> from hexmerger.formats.srec import select_tag
        >>> select_tag(0xFFFF), select_tag(0x1FFFF), select_tag(0x1000000)
        (1, 2, 3)
    """

    if address_max <= 0xFFFF:
        return 1
    elif address_max <= 0xFFFFFF:
        return 2
    elif address_max <= 0xFFFFFFFF:
        return 3
    else:
        raise EncodeError(f'address 0x{address_max:X} exceeds 32 bits')


def decode(
    data: AnyText,
    image: Optional[MemoryImage] = None,
    filename: Optional[str] = None,
) -> MemoryImage:
    r"""Decodes Motorola S-record data.

    Arguments:
        data (bytes):
            File contents.

        image (:obj:`MemoryImage`):
            Image to store data into, overwriting existing bytes; ``None``
            creates a new one.

        filename (str):
            File name for error messages.

    Returns:
        :obj:`MemoryImage`: The updated image.

    Raises:
        :obj:`RecordError`: Malformed record.

        :obj:`ChecksumError`: Checksum mismatch.

    Examples:
        >>> from hexmerger.formats import srec
        >>> image = srec.decode(b'S1130000285F245F2212226A000424290008237C2A')
        >>> image.to_blocks()
        [[0, bytearray(b'(_$_"\x12"j\x00\x04$)\x00\x08#|')]]
    """

    if image is None:
        image = MemoryImage()

    for lineno, line in iter_lines(data):
        if not line.startswith(b'S'):
            raise RecordError("line does not start with 'S'", filename=filename, line=lineno)

        match = LINE_REGEX.fullmatch(line)
        if not match:
            raise RecordError('syntax error', filename=filename, line=lineno)

        tag = int(match.group('tag'))
        if tag not in DATA_TAGS:
            continue

        record = unhexlify_line(match.group('payload'), filename, lineno)
        address_size = tag + 1
        if not record:
            raise RecordError('record too short', filename=filename, line=lineno)

        checksum = compute_checksum(record[:-1])
        if checksum != record[-1]:
            raise ChecksumError(checksum, record[-1], filename=filename, line=lineno)

        if record[0] != len(record) - 1:
            raise RecordError('record count mismatch', filename=filename, line=lineno)
        if record[0] < address_size + 1:
            raise RecordError('record too short', filename=filename, line=lineno)

        address = int.from_bytes(record[1:1 + address_size], 'big')
        image.write(address, record[1 + address_size:-1])

    return image


def encode(
    image: MemoryImage,
) -> bytes:
    r"""Encodes into Motorola S-record data.

    Data records hold up to 32 bytes each, aligned to 32-byte boundaries.
    The record tag (S1, S2, S3) is the narrowest able to address the highest
    defined byte; the termination record matches it.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to encode.

    Returns:
        bytes: File contents.

    Raises:
        :obj:`EncodeError`: Address wider than 32 bits.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.formats import srec
        >>> image = MemoryImage.from_bytes(b'ABC', 0x1234)
        >>> print(srec.encode(image).decode(), end='')
        S00F000068656C6C6F202020202000003C
        S1061234414243ED
        S9030000FC
    """

    tag = select_tag(image.content_endin or 0)
    address_size = tag + 1
    lines = [HEADER_RECORD]

    for address, chunk in iter_chunks(image):
        record = bytes((len(chunk) + address_size + 1,)) + address.to_bytes(address_size, 'big') + chunk
        record += bytes((compute_checksum(record),))
        lines.append(b'S%d%s' % (tag, hexlify(record)))

    lines.append(TERMINATOR_RECORDS[tag])
    lines.append(b'')
    return b'\n'.join(lines)
