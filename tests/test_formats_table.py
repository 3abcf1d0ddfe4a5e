# Copyright (c) 2020-2022, Andrea Zoppi.
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

import io

import pytest

from hexmerger.base import RecordError
from hexmerger.formats import table
from hexmerger.image import MemoryImage


def test_parse_token():
    assert table.parse_token(b'0x1F') == 0x1F
    assert table.parse_token(b'0X1f') == 0x1F
    assert table.parse_token(b'31') == 31
    assert table.parse_token(b'0') == 0
    assert table.parse_token(b'1F') is None
    assert table.parse_token(b'0x') is None
    assert table.parse_token(b'-1') is None
    assert table.parse_token(b'') is None


def test_decode():
    data = b'# address value\n0x100 65\n257\t0x42\n\n# tail\n0x200 0x78 extra\n'
    image = table.decode(data)
    assert image.to_blocks() == [[0x100, b'AB'], [0x200, b'x']]


def test_decode_unordered():
    image = table.decode(b'3 0x33\n1 0x31\n2 0x32\n1 0x00\n')
    assert list(image.items()) == [(1, 0x00), (2, 0x32), (3, 0x33)]


def test_decode_str():
    image = table.decode('0x10 0xFF\n')
    assert image.to_blocks() == [[0x10, b'\xFF']]


def test_decode_into_image():
    image = MemoryImage.from_bytes(b'012', 0x10)
    result = table.decode(b'0x11 0x41\n', image=image)
    assert result is image
    assert image.to_blocks() == [[0x10, b'0A2']]


def test_decode_max_address():
    image = table.decode(b'0xFFFFFFFFFFFFFFFF 0xFF\n')
    assert list(image.items()) == [(0xFFFFFFFFFFFFFFFF, 0xFF)]


def test_decode_missing_value():
    with pytest.raises(RecordError, match='missing value') as info:
        table.decode(b'# header\n0x100\n', filename='dump.txt')
    assert info.value.line == 2
    assert info.value.filename == 'dump.txt'


def test_decode_invalid_address():
    with pytest.raises(RecordError, match='invalid address'):
        table.decode(b'zz 0x41\n')
    with pytest.raises(RecordError, match='invalid address'):
        table.decode(b'0x10000000000000000 0x41\n')


def test_decode_invalid_value():
    with pytest.raises(RecordError, match='invalid value'):
        table.decode(b'0x100 1F\n')
    with pytest.raises(RecordError, match='invalid value'):
        table.decode(b'0x100 0x100\n')
    with pytest.raises(RecordError, match='invalid value'):
        table.decode(b'0x100 256\n')


def test_encode():
    image = MemoryImage.from_blocks([[0x100, b'AB'], [0x200, b'\x00']])
    assert table.encode(image) == (
        b'# address\tvalue\n'
        b'0x100\t0x41\n'
        b'0x101\t0x42\n'
        b'0x200\t0x00\n'
    )


def test_encode_empty():
    assert table.encode(MemoryImage()) == b'# address\tvalue\n'


def test_encode_console():
    image = MemoryImage.from_bytes(b'A', 0xABC)
    assert table.encode(image, console=True) == (
        b'    address\tvalue\n'
        b'    0xabc\t0x41\n'
    )


def test_print_image():
    image = MemoryImage.from_bytes(b'AB', 0x100)
    stream = io.StringIO()
    table.print_image(image, stream)
    assert stream.getvalue() == '    address\tvalue\n    0x100\t0x41\n    0x101\t0x42\n'


def test_print_image_stdout(capsys):
    table.print_image(MemoryImage.from_bytes(b'A', 0))
    assert capsys.readouterr().out == '    address\tvalue\n    0x0\t0x41\n'


def test_round_trip():
    image = MemoryImage.from_blocks([[0, b'\x00\x01'], [0x1234, b'xyz'], [0xFFFFFFFF00, b'\xFF']])
    assert table.decode(table.encode(image)) == image
