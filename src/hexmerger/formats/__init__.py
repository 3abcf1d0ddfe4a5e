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

r"""Record file formats.

Each format module provides a ``decode`` function, storing file contents
into a :obj:`hexmerger.MemoryImage`, and an ``encode`` function, serializing
a memory image into file contents.

+------------+--------------------------+----------------------+
| Name       | Module                   | File extensions      |
+============+==========================+======================+
| ``srec``   | :mod:`.srec`             | ``.s19``             |
+------------+--------------------------+----------------------+
| ``ihex``   | :mod:`.ihex`             | ``.hex``, ``.ihx``   |
+------------+--------------------------+----------------------+
| ``table``  | :mod:`.table`            | ``.txt``             |
+------------+--------------------------+----------------------+
| ``binary`` | :mod:`.binary`           | ``.bin``             |
+------------+--------------------------+----------------------+

Extensions are matched case-insensitively.
"""

import logging
import os
from types import ModuleType
from typing import Mapping
from typing import Optional
from typing import Union

from ..base import DEFAULT_SETTINGS
from ..base import Address
from ..base import ArgumentError
from ..base import FileAccessError
from ..base import Settings
from ..base import UnsupportedFormatError
from ..base import Verbosity
from ..image import MemoryImage
from ..utils import report
from . import binary
from . import ihex
from . import srec
from . import table

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

FORMATS: Mapping[str, ModuleType] = {
    'binary': binary,
    'ihex': ihex,
    'srec': srec,
    'table': table,
}
r"""Format modules, by name."""

EXTENSIONS: Mapping[str, str] = {
    '.bin': 'binary',
    '.hex': 'ihex',
    '.ihx': 'ihex',
    '.s19': 'srec',
    '.txt': 'table',
}
r"""Format names, by lower-case file extension."""

FORMAT_LABELS: Mapping[str, str] = {
    'binary': 'binary file',
    'ihex': 'Intel HEX file',
    'srec': 'Motorola S19 file',
    'table': 'ASCII table file',
}


def get_format(
    name: str,
) -> ModuleType:
    r"""Gets a format module by name.

    Arguments:
        name (str):
            Format name, see :data:`FORMATS`.

    Returns:
        module: Format module.

    Raises:
        :obj:`UnsupportedFormatError`: Unknown format name.
    """

    try:
        return FORMATS[name]
    except KeyError:
        raise UnsupportedFormatError(f'unsupported format {name!r}') from None


def guess_format(
    path: PathLike,
) -> str:
    r"""Guesses the format of a file from its extension.

    Arguments:
        path (str):
            File path.

    Returns:
        str: Format name.

    Raises:
        :obj:`UnsupportedFormatError`: Unsupported extension.

    Examples:
        >>> from hexmerger.formats import guess_format
        >>> guess_format('app.S19'), guess_format('boot.ihx'), guess_format('dump.bin')
        ('srec', 'ihex', 'binary')
    """

    extension = os.path.splitext(os.fspath(path))[1].lower()
    try:
        return EXTENSIONS[extension]
    except KeyError:
        supported = ', '.join(f'*{ext}' for ext in EXTENSIONS)
        raise UnsupportedFormatError(f'file {os.fspath(path)} has unsupported format ({supported})') from None


def decode(
    format_name: str,
    data: bytes,
    image: Optional[MemoryImage] = None,
    address: Optional[Address] = None,
    filename: Optional[str] = None,
) -> MemoryImage:
    r"""Decodes data of some format.

    Arguments:
        format_name (str):
            Format name, see :data:`FORMATS`.

        data (bytes):
            File contents.

        image (:obj:`MemoryImage`):
            Image to store data into, overwriting existing bytes; ``None``
            creates a new one.

        address (int):
            Start address; required by the ``binary`` format only.

        filename (str):
            File name for error messages.

    Returns:
        :obj:`MemoryImage`: The updated image.

    Raises:
        :obj:`UnsupportedFormatError`: Unknown format name.

        :obj:`ArgumentError`: Missing start address for binary data.

        :obj:`DecodeError`: Malformed data.
    """

    codec = get_format(format_name)
    if codec is binary:
        if address is None:
            raise ArgumentError('binary data requires a start address')
        return binary.decode(data, address, image=image, filename=filename)
    return codec.decode(data, image=image, filename=filename)


def encode(
    format_name: str,
    image: MemoryImage,
) -> bytes:
    r"""Encodes into data of some format.

    Arguments:
        format_name (str):
            Format name, see :data:`FORMATS`.

        image (:obj:`MemoryImage`):
            Image to encode.

    Returns:
        bytes: File contents.

    Raises:
        :obj:`UnsupportedFormatError`: Unknown format name.

        :obj:`EncodeError`: Image not representable by the format.
    """

    return get_format(format_name).encode(image)


def load(
    path: PathLike,
    image: Optional[MemoryImage] = None,
    address: Optional[Address] = None,
    settings: Optional[Settings] = None,
) -> MemoryImage:
    r"""Imports a file into a memory image.

    The format is guessed from the file extension. The whole file is decoded
    before `image` is updated, so that a decoding error leaves `image`
    unchanged.

    Arguments:
        path (str):
            File path.

        image (:obj:`MemoryImage`):
            Image to store data into, overwriting existing bytes; ``None``
            creates a new one.

        address (int):
            Start address; required by binary files only.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        :obj:`MemoryImage`: The updated image.

    Raises:
        :obj:`UnsupportedFormatError`: Unsupported file extension.

        :obj:`FileAccessError`: File cannot be read.

        :obj:`DecodeError`: Malformed file contents.
    """

    if settings is None:
        settings = DEFAULT_SETTINGS
    format_name = guess_format(path)
    filename = os.path.basename(os.fspath(path))
    settings.log(_LOGGER, Verbosity.SILENT, 'read %s %r', FORMAT_LABELS[format_name], filename)

    try:
        with open(path, 'rb') as stream:
            data = stream.read()
    except OSError as exc:
        raise FileAccessError(f'failed to open file {os.fspath(path)}') from exc

    loaded = decode(format_name, data, address=address, filename=filename)
    report(_LOGGER, settings, f'read {filename!r}', len(loaded),
           loaded.content_start, loaded.content_endin)
    if image is None:
        return loaded
    loaded.merge(image)
    return image


def save(
    path: PathLike,
    image: MemoryImage,
    settings: Optional[Settings] = None,
) -> None:
    r"""Exports a memory image into a file.

    The format is guessed from the file extension. The file is written only
    after the whole image got encoded successfully.

    Arguments:
        path (str):
            File path.

        image (:obj:`MemoryImage`):
            Image to export.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Raises:
        :obj:`UnsupportedFormatError`: Unsupported file extension.

        :obj:`FileAccessError`: File cannot be written.

        :obj:`EncodeError`: Image not representable by the format.
    """

    if settings is None:
        settings = DEFAULT_SETTINGS
    format_name = guess_format(path)
    filename = os.path.basename(os.fspath(path))
    settings.log(_LOGGER, Verbosity.SILENT, 'export %s %r', FORMAT_LABELS[format_name], filename)

    data = encode(format_name, image)

    try:
        with open(path, 'wb') as stream:
            stream.write(data)
    except OSError as exc:
        raise FileAccessError(f'failed to create file {os.fspath(path)}') from exc

    count = len(data) if format_name == 'binary' else len(image)
    report(_LOGGER, settings, f'export {filename!r}', count,
           image.content_start, image.content_endin)
