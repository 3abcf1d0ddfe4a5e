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

r"""Range operations over memory images.

These are the user-facing editing commands. Each one validates its address
window before touching the image: a ``start`` address higher than the
``end`` address raises :obj:`AddressRangeError`, and the image is left as it
was. Outcomes are reported through :mod:`logging`, as per the verbosity of
the provided :obj:`Settings`.
"""

import logging
import random
from typing import List
from typing import Optional
from typing import Tuple

from .base import DEFAULT_SETTINGS
from .base import Address
from .base import Settings
from .base import Value
from .base import Verbosity
from .base import check_window
from .image import MemoryImage
from .utils import report

_LOGGER = logging.getLogger(__name__)

ChecksumEntry = Tuple[Address, Address, int]


def _count_window(
    image: MemoryImage,
    start: Address,
    end: Address,
) -> int:

    return image.get_index(end + 1) - image.get_index(start)


def fill_image(
    image: MemoryImage,
    start: Address,
    end: Address,
    value: Value,
    settings: Optional[Settings] = None,
) -> None:
    r"""Fills an address window with a fixed value.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        start (int):
            Start address (inclusive).

        end (int):
            End address (inclusive).

        value (int):
            Byte value.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Raises:
        :obj:`AddressRangeError`: `start` is higher than `end`.

        :obj:`ImageSizeError`: Size guard exceeded.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(start, end)
    image.fill_value(start, end, value)
    report(_LOGGER, settings, 'fill image', end - start + 1, start, end)


def fill_image_random(
    image: MemoryImage,
    start: Address,
    end: Address,
    settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
) -> None:
    r"""Fills an address window with random values.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        start (int):
            Start address (inclusive).

        end (int):
            End address (inclusive).

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

        rng (:obj:`random.Random`):
            Random generator; ``None`` uses the :mod:`random` module.

    Raises:
        :obj:`AddressRangeError`: `start` is higher than `end`.

        :obj:`ImageSizeError`: Size guard exceeded.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(start, end)
    image.fill_random(start, end, rng=rng)
    report(_LOGGER, settings, 'random fill image', end - start + 1, start, end)


def clip_image(
    image: MemoryImage,
    start: Address,
    end: Address,
    settings: Optional[Settings] = None,
) -> int:
    r"""Clips an image to an address window.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        start (int):
            Start address (inclusive).

        end (int):
            End address (inclusive).

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        int: Number of deleted bytes.

    Raises:
        :obj:`AddressRangeError`: `start` is higher than `end`.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(start, end)
    count = len(image)
    image.clip(start, end)
    cleared = count - len(image)
    report(_LOGGER, settings, 'clip image', cleared, start, end)
    return cleared


def cut_image(
    image: MemoryImage,
    start: Address,
    end: Address,
    settings: Optional[Settings] = None,
) -> int:
    r"""Cuts an address window out of an image.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        start (int):
            Start address (inclusive).

        end (int):
            End address (inclusive).

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        int: Number of deleted bytes.

    Raises:
        :obj:`AddressRangeError`: `start` is higher than `end`.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(start, end)
    count = len(image)
    image.cut(start, end)
    cleared = count - len(image)
    report(_LOGGER, settings, 'cut image', cleared, start, end)
    return cleared


def copy_image(
    image: MemoryImage,
    src_start: Address,
    src_stop: Address,
    dest_start: Address,
    settings: Optional[Settings] = None,
) -> int:
    r"""Copies an address window within an image.

    Data at the source window is kept, unless overwritten by an overlapping
    destination window.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        src_start (int):
            Source start address (inclusive).

        src_stop (int):
            Source end address (inclusive).

        dest_start (int):
            Destination start address.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        int: Number of defined source bytes.

    Raises:
        :obj:`AddressRangeError`: `src_start` is higher than `src_stop`.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(src_start, src_stop)
    count = _count_window(image, src_start, src_stop)
    image.copy_range(src_start, src_stop, dest_start)
    settings.log(_LOGGER, Verbosity.CHATTY, 'copy [0x%X; 0x%X] to 0x%X', src_start, src_stop, dest_start)
    report(_LOGGER, settings, 'copy data', count)
    return count


def move_image(
    image: MemoryImage,
    src_start: Address,
    src_stop: Address,
    dest_start: Address,
    settings: Optional[Settings] = None,
) -> int:
    r"""Moves an address window within an image.

    Data at the source window gets deleted, except where rewritten by an
    overlapping destination window.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to edit.

        src_start (int):
            Source start address (inclusive).

        src_stop (int):
            Source end address (inclusive).

        dest_start (int):
            Destination start address.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        int: Number of defined source bytes.

    Raises:
        :obj:`AddressRangeError`: `src_start` is higher than `src_stop`.
    """

    settings = settings or DEFAULT_SETTINGS
    check_window(src_start, src_stop)
    count = _count_window(image, src_start, src_stop)
    image.move_range(src_start, src_stop, dest_start)
    settings.log(_LOGGER, Verbosity.CHATTY, 'move [0x%X; 0x%X] to 0x%X', src_start, src_stop, dest_start)
    report(_LOGGER, settings, 'move data', count)
    return count


def merge_images(
    dest: MemoryImage,
    *sources: MemoryImage,
    settings: Optional[Settings] = None,
) -> MemoryImage:
    r"""Merges images into a destination image.

    Sources are merged in order, so that later sources overwrite earlier
    ones.

    Arguments:
        dest (:obj:`MemoryImage`):
            Destination image.

        sources (:obj:`MemoryImage`):
            Images to merge.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        :obj:`MemoryImage`: `dest`.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.ops import merge_images
        >>> a = MemoryImage.from_bytes(b'ABC', 0)
        >>> b = MemoryImage.from_bytes(b'xy', 2)
        >>> merge_images(MemoryImage(), a, b).to_blocks()
        [[0, bytearray(b'ABxy')]]
    """

    settings = settings or DEFAULT_SETTINGS
    for source in sources:
        source.merge(dest)
    report(_LOGGER, settings, 'merge images', len(dest), dest.content_start, dest.content_endin)
    return dest


def checksum_image(
    image: MemoryImage,
    settings: Optional[Settings] = None,
) -> List[ChecksumEntry]:
    r"""CRC32-IEEE of each block of consecutive addresses.

    Arguments:
        image (:obj:`MemoryImage`):
            Image to inspect.

        settings (:obj:`Settings`):
            Current settings; ``None`` means default.

    Returns:
        list of triples: ``(start, end, crc32)`` of each block, with both
        addresses inclusive; empty for an empty image.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> from hexmerger.ops import checksum_image
        >>> image = MemoryImage.from_blocks([[0x100, b'123456789'], [0x200, b'']])
        >>> [(hex(s), hex(e), hex(c)) for s, e, c in checksum_image(image)]
        [('0x100', '0x108', '0xcbf43926')]
    """

    settings = settings or DEFAULT_SETTINGS
    if not image:
        settings.log(_LOGGER, Verbosity.SILENT, 'CRC32 checksum skipped for empty image')
        return []

    checksums = []
    for idx_start, idx_end in image.blocks():
        start = image.entry(idx_start)[0]
        end = image.entry(idx_end)[0]
        crc = image.checksum_crc32(idx_start, idx_end)
        settings.log(_LOGGER, Verbosity.SILENT, 'CRC32-IEEE [0x%04X; 0x%04X]: 0x%08X', start, end, crc)
        checksums.append((start, end, crc))
    return checksums
