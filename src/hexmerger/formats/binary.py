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

r"""Raw binary format.

Binary files hold plain data bytes, without any addressing: the start
address must be provided on decoding, and it is lost on encoding. Binary
files cannot represent undefined bytes either: any gap within the encoded
address span is filled with ``0x00``.
"""

from typing import Optional

from ..base import BUFFER_MAX
from ..base import Address
from ..base import ImageSizeError
from ..image import MemoryImage


def decode(
    data: bytes,
    address: Address,
    image: Optional[MemoryImage] = None,
    filename: Optional[str] = None,
) -> MemoryImage:
    r"""Decodes binary data.

    Arguments:
        data (bytes):
            File contents.

        address (int):
            Address of the first byte.

        image (:obj:`MemoryImage`):
            Image to store data into, overwriting existing bytes; ``None``
            creates a new one.

        filename (str):
            File name, unused; binary data has no malformed content.

    Returns:
        :obj:`MemoryImage`: The updated image.

    Examples:
        >>> from hexmerger.formats import binary
        >>> binary.decode(b'ABC', 0x100).to_blocks()
        [[256, bytearray(b'ABC')]]
    """

    if image is None:
        image = MemoryImage()
    image.write(address, data)
    return image


def encode(
    image: MemoryImage,
) -> bytes:
    r"""Encodes into binary data.

    The address span from the lowest to the highest defined byte is written
    in full; undefined bytes become ``0x00``.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to encode.

    Returns:
        bytes: File contents; empty for an empty image.

    Raises:
        :obj:`ImageSizeError`: Address span larger than the size guard.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.formats import binary
        >>> image = MemoryImage.from_blocks([[0x100, b'AB'], [0x104, b'x']])
        >>> binary.encode(image)
        b'AB\x00\x00x'
    """

    if not image:
        return b''

    start, endin = image.content_span
    size = endin - start + 1
    if size > BUFFER_MAX:
        raise ImageSizeError(f'binary span of {size} bytes exceeds the size guard')

    buffer = bytearray(size)
    for idx_start, idx_end in image.blocks():
        offset = image.entry(idx_start)[0] - start
        buffer[offset:offset + (idx_end - idx_start + 1)] = image.data_slice(idx_start, idx_end)
    return bytes(buffer)
