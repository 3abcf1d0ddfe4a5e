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

r"""Firmware memory image conversion and merging.

Firmware images come in many file formats: Motorola S-record, Intel HEX,
raw binary, plain address/value tables. This package decodes all of them
into a single sparse memory image, applies address range edits, and encodes
the result into any of those formats again.

The audience of this package are mostly those who have to merge several
firmware parts (*e.g.* bootloader, application, calibration data) into one
image to program into a microcontroller, where a very broad address space
is used only in some sparse parts.

The central object is the :obj:`MemoryImage`, mapping each *defined*
address to a byte value:

>>> from hexmerger import MemoryImage
>>> image = MemoryImage.from_blocks([[0x100, b'ABC'], [0x200, b'xyz']])
>>> image.get_data(0x101)
66
>>> image.get_data(0x180) is None
True

Address windows are *inclusive*, i.e. ``[start, end]``:

>>> image.cut(0x102, 0x200)
>>> image.to_blocks()
[[256, bytearray(b'AB')], [513, bytearray(b'yz')]]

Files are imported and exported by their extension, see
:mod:`hexmerger.formats`; the user-facing editing commands live within
:mod:`hexmerger.ops`.
"""

__version__ = '0.1.0'

from .base import *  # noqa: F401, F403
from .checksums import crc32  # noqa: F401
from .checksums import fletcher16  # noqa: F401
from .formats import decode  # noqa: F401
from .formats import encode  # noqa: F401
from .formats import guess_format  # noqa: F401
from .formats import load  # noqa: F401
from .formats import save  # noqa: F401
from .image import MemoryImage  # noqa: F401
from .ops import checksum_image  # noqa: F401
from .ops import clip_image  # noqa: F401
from .ops import copy_image  # noqa: F401
from .ops import cut_image  # noqa: F401
from .ops import fill_image  # noqa: F401
from .ops import fill_image_random  # noqa: F401
from .ops import merge_images  # noqa: F401
from .ops import move_image  # noqa: F401
