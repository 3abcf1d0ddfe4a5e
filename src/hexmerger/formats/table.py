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

r"""Plain text table format.

Each line holds an address and a value, separated by whitespace. Either
token can be hexadecimal (``0x`` prefix) or decimal. Lines starting with
``#`` are comments.

Encoded tables have a comment header, then one ``0x<address>\t0x<value>``
line per defined byte, by ascending address.
"""

import re
import sys
from typing import Optional
from typing import TextIO

from ..base import ADDRESS_MAX
from ..base import RecordError
from ..image import MemoryImage
from ..utils import AnyText
from ..utils import iter_lines

HEX_REGEX = re.compile(rb'0[xX](?P<digits>[0-9A-Fa-f]+)')
DEC_REGEX = re.compile(rb'[0-9]+')

CONSOLE_INDENT: str = '    '


def parse_token(
    token: bytes,
) -> Optional[int]:
    r"""Parses a hexadecimal or decimal token.

    Arguments:
        token (bytes):
            Token to parse.

    Returns:
        int: Parsed value; ``None`` if the token is neither hexadecimal nor
        decimal.

    Examples:
        >>> from hexmerger.formats.table import parse_token
        >>> parse_token(b'0x1F'), parse_token(b'31'), parse_token(b'1F')
        (31, 31, None)
    """

    match = HEX_REGEX.fullmatch(token)
    if match:
        return int(match.group('digits'), 16)
    if DEC_REGEX.fullmatch(token):
        return int(token, 10)
    return None


def decode(
    data: AnyText,
    image: Optional[MemoryImage] = None,
    filename: Optional[str] = None,
) -> MemoryImage:
    r"""Decodes a text table.

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
        :obj:`RecordError`: Invalid or missing address or value.

    Examples:
        >>> from hexmerger.formats import table
        >>> image = table.decode(b'# address value\n0x100 65\n257 0x42\n')
        >>> image.to_blocks()
        [[256, bytearray(b'AB')]]
    """

    if image is None:
        image = MemoryImage()

    for lineno, line in iter_lines(data):
        if line.startswith(b'#'):
            continue

        tokens = line.split()
        if len(tokens) < 2:
            raise RecordError('missing value', filename=filename, line=lineno)
        address_token, value_token = tokens[0], tokens[1]

        address = parse_token(address_token)
        if address is None or address > ADDRESS_MAX:
            raise RecordError(f'invalid address {address_token.decode("ascii", "replace")!r}',
                              filename=filename, line=lineno)

        value = parse_token(value_token)
        if value is None or value > 0xFF:
            raise RecordError(f'invalid value {value_token.decode("ascii", "replace")!r}',
                              filename=filename, line=lineno)

        image.add_data(address, value)

    return image


def encode(
    image: MemoryImage,
    console: bool = False,
) -> bytes:
    r"""Encodes into a text table.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to encode.

        console (bool):
            Console layout: indented lines, header not commented.

    Returns:
        bytes: Table text.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.formats import table
        >>> image = MemoryImage.from_bytes(b'AB', 0x100)
        >>> table.encode(image).splitlines()
        [b'# address\tvalue', b'0x100\t0x41', b'0x101\t0x42']
    """

    indent = CONSOLE_INDENT if console else ''
    header = f'{indent}address\tvalue' if console else '# address\tvalue'
    lines = [header]
    lines.extend(f'{indent}0x{address:x}\t0x{value:02x}' for address, value in image.items())
    lines.append('')
    return '\n'.join(lines).encode('ascii')


def print_image(
    image: MemoryImage,
    stream: Optional[TextIO] = None,
) -> None:
    r"""Prints a memory image as a table.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to print.

        stream (text stream):
            Output stream; ``None`` means :obj:`sys.stdout`.
    """

    if stream is None:
        stream = sys.stdout
    stream.write(encode(image, console=True).decode('ascii'))
