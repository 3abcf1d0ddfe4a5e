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

import logging
import os
from pathlib import Path

import pytest

from hexmerger import formats
from hexmerger.base import ArgumentError
from hexmerger.base import ChecksumError
from hexmerger.base import EncodeError
from hexmerger.base import FileAccessError
from hexmerger.base import RecordError
from hexmerger.base import Settings
from hexmerger.base import UnsupportedFormatError
from hexmerger.base import Verbosity
from hexmerger.formats import binary
from hexmerger.formats import ihex
from hexmerger.formats import srec
from hexmerger.formats import table
from hexmerger.image import MemoryImage


def create_image():
    return MemoryImage.from_blocks([[0x100, b'Hello'], [0x200, b'World!']])


def test_registry():
    assert formats.FORMATS == {'binary': binary, 'ihex': ihex, 'srec': srec, 'table': table}
    assert set(formats.EXTENSIONS.values()) == set(formats.FORMATS)
    assert set(formats.FORMAT_LABELS) == set(formats.FORMATS)


def test_get_format():
    for name, module in formats.FORMATS.items():
        assert formats.get_format(name) is module

    with pytest.raises(UnsupportedFormatError):
        formats.get_format('elf')


def test_guess_format():
    assert formats.guess_format('app.s19') == 'srec'
    assert formats.guess_format('app.hex') == 'ihex'
    assert formats.guess_format('app.ihx') == 'ihex'
    assert formats.guess_format('app.txt') == 'table'
    assert formats.guess_format('app.bin') == 'binary'


def test_guess_format_case_insensitive():
    assert formats.guess_format('APP.S19') == 'srec'
    assert formats.guess_format('App.Hex') == 'ihex'
    assert formats.guess_format('dump.BIN') == 'binary'


def test_guess_format_path():
    assert formats.guess_format(Path('build') / 'boot.ihx') == 'ihex'
    assert formats.guess_format(os.path.join('some.dir', 'cal.txt')) == 'table'


def test_guess_format_unsupported():
    for path in ('app.elf', 'app', 'app.s19.bak', '.hex.gz'):
        with pytest.raises(UnsupportedFormatError, match='unsupported format'):
            formats.guess_format(path)


def test_unsupported_format_is_argument_error():
    with pytest.raises(ArgumentError):
        formats.guess_format('app.elf')
    with pytest.raises(ValueError):
        formats.guess_format('app.elf')


def test_decode_dispatch():
    image = formats.decode('srec', b'S1061234414243ED')
    assert image.to_blocks() == [[0x1234, b'ABC']]

    image = formats.decode('ihex', b':0300100041424327', image=image)
    assert image.to_blocks() == [[0x10, b'ABC'], [0x1234, b'ABC']]

    image = formats.decode('binary', b'xyz', address=0x11)
    assert image.to_blocks() == [[0x11, b'xyz']]

    image = formats.decode('table', b'0x10 0x41\n')
    assert image.to_blocks() == [[0x10, b'A']]


def test_decode_binary_address():
    with pytest.raises(ArgumentError, match='start address'):
        formats.decode('binary', b'xyz')


def test_decode_filename():
    with pytest.raises(RecordError) as info:
        formats.decode('table', b'0x10\n', filename='cal.txt')
    assert info.value.filename == 'cal.txt'


def test_encode_dispatch():
    image = MemoryImage.from_bytes(b'ABC', 0x1234)
    assert formats.encode('srec', image) == srec.encode(image)
    assert formats.encode('ihex', image) == ihex.encode(image)
    assert formats.encode('binary', image) == b'ABC'
    assert formats.encode('table', image) == table.encode(image)

    with pytest.raises(UnsupportedFormatError):
        formats.encode('elf', image)


@pytest.mark.parametrize('filename', ['out.s19', 'out.hex', 'out.ihx', 'out.txt'])
def test_save_load(tmp_path, filename):
    path = tmp_path / filename
    image = create_image()
    formats.save(path, image)
    assert path.is_file()
    assert formats.load(path) == image


def test_save_load_binary(tmp_path):
    path = tmp_path / 'out.bin'
    image = create_image()
    formats.save(str(path), image)
    assert path.read_bytes() == binary.encode(image)

    loaded = formats.load(str(path), address=0x100)
    assert loaded.content_span == (0x100, 0x205)
    assert loaded.get_data(0x180) == 0x00
    assert loaded.get_data(0x200) == ord('W')


def test_load_binary_address(tmp_path):
    path = tmp_path / 'out.bin'
    path.write_bytes(b'ABC')
    with pytest.raises(ArgumentError):
        formats.load(path)


def test_load_merge(tmp_path):
    path = tmp_path / 'patch.s19'
    formats.save(path, MemoryImage.from_bytes(b'xy', 0x102))
    image = create_image()
    result = formats.load(path, image=image)
    assert result is image
    assert image.to_blocks() == [[0x100, b'Hexyo'], [0x200, b'World!']]


def test_load_missing(tmp_path):
    path = tmp_path / 'missing.hex'
    with pytest.raises(FileAccessError, match='failed to open file') as info:
        formats.load(path)
    assert isinstance(info.value, OSError)
    assert isinstance(info.value.__cause__, FileNotFoundError)


def test_load_unsupported(tmp_path):
    path = tmp_path / 'app.elf'
    path.write_bytes(b'\x7FELF')
    with pytest.raises(UnsupportedFormatError):
        formats.load(path)


def test_load_decode_error(tmp_path):
    path = tmp_path / 'bad.s19'
    path.write_bytes(b'S1061234414243EC\n')
    with pytest.raises(ChecksumError) as info:
        formats.load(path)
    assert info.value.filename == 'bad.s19'
    assert info.value.line == 1


def test_save_missing_directory(tmp_path):
    path = tmp_path / 'missing' / 'out.hex'
    with pytest.raises(FileAccessError, match='failed to create file'):
        formats.save(path, create_image())


def test_save_encode_error(tmp_path):
    path = tmp_path / 'out.s19'
    image = MemoryImage()
    image.add_data(0x100000000, 0xFF)
    with pytest.raises(EncodeError):
        formats.save(path, image)
    assert not path.exists()


def test_save_unsupported(tmp_path):
    with pytest.raises(UnsupportedFormatError):
        formats.save(tmp_path / 'out.elf', create_image())


def test_load_logging(tmp_path, caplog):
    path = tmp_path / 'app.s19'
    formats.save(path, create_image(), settings=Settings(Verbosity.MUTE))
    caplog.set_level(logging.DEBUG)

    formats.load(path)
    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "read Motorola S19 file 'app.s19'",
        "read 'app.s19' done (11B)",
    ]
    assert all(record.levelno == logging.INFO for record in caplog.records)
    assert all(record.name == 'hexmerger.formats' for record in caplog.records)


def test_load_logging_chatty(tmp_path, caplog):
    path = tmp_path / 'app.hex'
    formats.save(path, create_image(), settings=Settings(Verbosity.MUTE))
    caplog.set_level(logging.DEBUG)

    formats.load(path, settings=Settings(Verbosity.CHATTY))
    assert caplog.records[-1].getMessage() == "read 'app.hex' done (11B in [0x100; 0x205])"
    assert caplog.records[-1].levelno == logging.DEBUG


def test_save_logging_silent(tmp_path, caplog):
    caplog.set_level(logging.DEBUG)
    formats.save(tmp_path / 'app.bin', create_image(), settings=Settings(Verbosity.SILENT))
    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "export binary file 'app.bin'",
        "export 'app.bin' done",
    ]


def test_logging_mute(tmp_path, caplog):
    caplog.set_level(logging.DEBUG)
    path = tmp_path / 'app.txt'
    settings = Settings(Verbosity.MUTE)
    formats.save(path, create_image(), settings=settings)
    formats.load(path, settings=settings)
    assert not caplog.records


def test_load_logging_overwrite(tmp_path, caplog):
    path = tmp_path / 'app.s19'
    formats.save(path, create_image(), settings=Settings(Verbosity.MUTE))
    caplog.set_level(logging.DEBUG)

    image = create_image()
    formats.load(path, image=image)
    assert image == create_image()
    assert caplog.records[-1].getMessage() == "read 'app.s19' done (11B)"


def test_load_error_leaves_image(tmp_path):
    path = tmp_path / 'bad.hex'
    path.write_bytes(b':0300100041424327\n:0300200041424318\n')
    image = create_image()
    with pytest.raises(ChecksumError) as info:
        formats.load(path, image=image)
    assert info.value.line == 2
    assert image == create_image()
