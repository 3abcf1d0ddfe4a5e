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

r"""Intel HEX format.

Each line is a record made of hexadecimal pairs after a leading ``:``:

``:<count><offset><tag><data...><checksum>``

where `count` is the number of data bytes, `offset` is a 16-bit address, and
the checksum is the two's complement of the byte sum of all the other fields.

+-----+-----------------------------+--------------------------------+
| Tag | Name                        | Handling                       |
+=====+=============================+================================+
| 00  | Data                        | stored at extension + offset   |
+-----+-----------------------------+--------------------------------+
| 01  | End of file                 | stops decoding                 |
+-----+-----------------------------+--------------------------------+
| 02  | Extended segment address    | unsupported, error             |
+-----+-----------------------------+--------------------------------+
| 03  | Start segment address       | ignored                        |
+-----+-----------------------------+--------------------------------+
| 04  | Extended linear address     | sets the upper 16 address bits |
+-----+-----------------------------+--------------------------------+
| 05  | Start linear address        | ignored                        |
+-----+-----------------------------+--------------------------------+
"""

import enum
import re
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

LINE_REGEX = re.compile(rb':(?P<payload>[0-9A-Fa-f]*)')


class IhexTag(enum.IntEnum):
    r"""Intel HEX record tag."""

    DATA = 0
    END_OF_FILE = 1
    EXTENDED_SEGMENT_ADDRESS = 2
    START_SEGMENT_ADDRESS = 3
    EXTENDED_LINEAR_ADDRESS = 4
    START_LINEAR_ADDRESS = 5


def compute_checksum(
    record: bytes,
) -> int:
    r"""Computes the checksum of a record.

    Arguments:
        record (bytes):
            Count, offset, tag, and data bytes.

    Returns:
        int: Two's complement of the byte sum.
    """

    return (0x100 - (sum(record) & 0xFF)) & 0xFF


def build_record(
    offset: int,
    tag: IhexTag,
    data: bytes = b'',
) -> bytes:
    r"""Builds a record line.

    Arguments:
        offset (int):
            16-bit address field.

        tag (:obj:`IhexTag`):
            Record tag.

        data (bytes):
            Record data.

    Returns:
        bytes: Record line, without line terminator.

    Examples:
        >>> from hexmerger.formats.ihex import IhexTag, build_record
        >>> build_record(0, IhexTag.END_OF_FILE)
        b':00000001FF'
        >>> build_record(0, IhexTag.EXTENDED_LINEAR_ADDRESS, b'\x00\x01')
        b':020000040001F9'
    """

    record = bytes((len(data),)) + offset.to_bytes(2, 'big') + bytes((tag,)) + data
    record += bytes((compute_checksum(record),))
    return b':' + hexlify(record)


END_OF_FILE_RECORD: bytes = build_record(0, IhexTag.END_OF_FILE)


def decode(
    data: AnyText,
    image: Optional[MemoryImage] = None,
    filename: Optional[str] = None,
) -> MemoryImage:
    r"""Decodes Intel HEX data.

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
        :obj:`RecordError`: Malformed or unsupported record.

        :obj:`ChecksumError`: Checksum mismatch.

    Examples:
        >>> from hexmerger.formats import ihex
        >>> image = ihex.decode(b':020000040001F9\n:0300100041424327\n:00000001FF\n')
        >>> image.to_blocks()
        [[65552, bytearray(b'ABC')]]
    """

    if image is None:
        image = MemoryImage()
    extension = 0

    for lineno, line in iter_lines(data):
        if not line.startswith(b':'):
            raise RecordError("line does not start with ':'", filename=filename, line=lineno)

        match = LINE_REGEX.fullmatch(line)
        if not match:
            raise RecordError('syntax error', filename=filename, line=lineno)

        record = unhexlify_line(match.group('payload'), filename, lineno)
        if len(record) < 5:
            raise RecordError('record too short', filename=filename, line=lineno)

        checksum = compute_checksum(record[:-1])
        if checksum != record[-1]:
            raise ChecksumError(checksum, record[-1], filename=filename, line=lineno)

        if record[0] != len(record) - 5:
            raise RecordError('record count mismatch', filename=filename, line=lineno)

        offset = int.from_bytes(record[1:3], 'big')
        tag = record[3]
        payload = record[4:-1]

        if tag == IhexTag.DATA:
            image.write(extension + offset, payload)

        elif tag == IhexTag.END_OF_FILE:
            break

        elif tag == IhexTag.EXTENDED_SEGMENT_ADDRESS:
            raise RecordError('extended segment address type 2 not supported',
                              filename=filename, line=lineno)

        elif tag == IhexTag.EXTENDED_LINEAR_ADDRESS:
            if len(payload) != 2:
                raise RecordError('extended linear address needs 2 data bytes',
                                  filename=filename, line=lineno)
            extension = int.from_bytes(payload, 'big') << 16

        elif tag in (IhexTag.START_SEGMENT_ADDRESS, IhexTag.START_LINEAR_ADDRESS):
            pass

        else:
            raise RecordError(f'unsupported type {tag}', filename=filename, line=lineno)

    return image


def encode(
    image: MemoryImage,
) -> bytes:
    r"""Encodes into Intel HEX data.

    Data records hold up to 32 bytes each, aligned to 32-byte boundaries.
    If the highest defined address exceeds 16 bits, an extended linear
    address record precedes every change of the upper 16 address bits.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to encode.

    Returns:
        bytes: File contents.

    Raises:
        :obj:`EncodeError`: Address wider than 32 bits.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.formats import ihex
        >>> image = MemoryImage.from_bytes(b'ABC', 0x10010)
        >>> print(ihex.encode(image).decode(), end='')
        :020000040001F9
        :0300100041424327
        :00000001FF
    """

    lines = []
    address_max = image.content_endin or 0
    if address_max > 0xFFFFFFFF:
        raise EncodeError(f'address 0x{address_max:X} exceeds 32 bits')
    use_extension = address_max > 0xFFFF
    extension = None

    for address, chunk in iter_chunks(image):
        if use_extension and extension != address >> 16:
            extension = address >> 16
            lines.append(build_record(0, IhexTag.EXTENDED_LINEAR_ADDRESS, extension.to_bytes(2, 'big')))
        lines.append(build_record(address & 0xFFFF, IhexTag.DATA, chunk))

    lines.append(END_OF_FILE_RECORD)
    lines.append(b'')
    return b'\n'.join(lines)
