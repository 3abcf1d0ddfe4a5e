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

r"""Sparse memory image.

A memory image maps addresses (up to 64 bits wide) to byte values, where
only some addresses are actually *defined*. An address without an entry is
undefined, which is different from holding the value ``0x00``.

Entries live within an *arena*: two parallel contiguous buffers, one for the
addresses and one for the data bytes, sorted by strictly ascending address.
Lookups are binary searches over the address buffer; the buffers grow and
shrink by a margin factor, up to a hard size guard.

+---------+--------+--------+--------+--------+--------+
| index   |   0    |   1    |   2    |   3    |   4    |
+=========+========+========+========+========+========+
| address | 0x0100 | 0x0101 | 0x0102 | 0x0200 | 0x0201 |
+---------+--------+--------+--------+--------+--------+
| data    |  0x41  |  0x42  |  0x43  |  0x78  |  0x79  |
+---------+--------+--------+--------+--------+--------+

Consecutive addresses make a *block*: the image above holds two blocks,
spanning indices ``[0, 2]`` and ``[3, 4]``.

Address windows are always *inclusive* on both ends, i.e. ``start`` and
``end`` are both part of the window.
"""

import random
from array import array
from bisect import bisect_left
from bisect import bisect_right
from typing import Any
from typing import Iterable
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import TypeVar

from bytesparse import Memory

from .base import BUFFER_MARGIN
from .base import BUFFER_MAX
from .base import ENTRY_SIZE
from .base import Address
from .base import BlockList
from .base import ClosedInterval
from .base import ImageSizeError
from .base import Index
from .base import Value
from .base import check_address
from .base import check_window
from .checksums import crc32
from .checksums import fletcher16

try:
    from typing import Self
except ImportError:  # pragma: no cover  # Python < 3.11
    _ImageSelf = TypeVar('_ImageSelf', bound='MemoryImage')
else:  # pragma: no cover
    _ImageSelf = Self

MemoryEntry = Tuple[Address, Value]


def _check_value(value: Value) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError('byte must be in range(0, 256)')


class MemoryImage:
    r"""Sparse memory image.

    Ordered container of ``(address, value)`` entries, each being one
    defined byte.

    Examples:
        >>> from hexmerger import MemoryImage
        >>> image = MemoryImage()
        >>> image.add_data(0x1000, 0xAB)
        >>> image.add_data(0x0FFF, 0x00)
        >>> list(image.items())
        [(4095, 0), (4096, 171)]
        >>> image.get_data(0x1000)
        171
        >>> image.get_data(0x1001) is None
        True
    """

    MAX_ENTRIES: int = BUFFER_MAX // ENTRY_SIZE
    r"""Maximum number of entries, as per backing storage size guard."""

    def __init__(
        self,
    ):

        self._addresses: array = array('Q')
        self._data: bytearray = bytearray()
        self._count: int = 0

    def __bool__(
        self,
    ) -> bool:

        return self._count > 0

    def __contains__(
        self,
        address: Address,
    ) -> bool:

        return self.get_data(address) is not None

    def __copy__(
        self: _ImageSelf,
    ) -> _ImageSelf:

        return self.clone()

    def __deepcopy__(
        self: _ImageSelf,
        memo: Optional[dict] = None,
    ) -> _ImageSelf:

        return self.clone()

    def __eq__(
        self,
        other: Any,
    ) -> bool:

        if not isinstance(other, MemoryImage):
            return NotImplemented
        count = self._count
        if count != other._count:
            return False
        return (self._addresses[:count] == other._addresses[:count] and
                self._data[:count] == other._data[:count])

    def __iter__(
        self,
    ) -> Iterator[MemoryEntry]:

        yield from self.items()

    def __len__(
        self,
    ) -> int:
        r"""Number of defined bytes.

        Returns:
            int: Number of entries.
        """

        return self._count

    def __repr__(
        self,
    ) -> str:

        if self._count:
            start, endin = self.content_span
            return f'<{type(self).__name__}[0x{start:X}:0x{endin:X}]@0x{id(self):X}>'
        return f'<{type(self).__name__}[]@0x{id(self):X}>'

    # ------------------------------------------------------------------------
    # Backing storage

    @property
    def capacity(
        self,
    ) -> int:
        r"""Number of entries the backing storage can hold."""

        return len(self._data)

    def _reserve(
        self,
        count: int,
    ) -> None:

        capacity = len(self._data)
        if count <= capacity:
            return

        max_entries = self.MAX_ENTRIES
        if count > max_entries:
            raise ImageSizeError(f'memory image size guard exceeded: {count} > {max_entries} entries')

        capacity = max(count, int(capacity * BUFFER_MARGIN) + 1)
        capacity = min(capacity, max_entries)
        more = capacity - len(self._data)
        self._addresses.frombytes(bytes(self._addresses.itemsize * more))
        self._data.extend(bytes(more))

    def _shrink(
        self,
    ) -> None:

        capacity = len(self._data)
        count = self._count
        if count * BUFFER_MARGIN * BUFFER_MARGIN < capacity:
            capacity = int(count * BUFFER_MARGIN)
            del self._addresses[capacity:]
            del self._data[capacity:]

    def _replace(
        self,
        idx_start: Index,
        idx_endex: Index,
        addresses: Iterable[Address],
        values: bytes,
    ) -> None:
        # Replaces entries [idx_start, idx_endex) with new sorted entries,
        # which must fit between the neighbors of the replaced range.
        size = len(values)
        count = self._count
        count_new = count - (idx_endex - idx_start) + size
        self._reserve(count_new)

        addrs = self._addresses
        data = self._data
        tail_start = idx_start + size
        if tail_start != idx_endex:
            tail_endex = tail_start + (count - idx_endex)
            addrs[tail_start:tail_endex] = addrs[idx_endex:count]
            data[tail_start:tail_endex] = data[idx_endex:count]

        if size:
            addrs[idx_start:tail_start] = array('Q', addresses)
            data[idx_start:tail_start] = values

        self._count = count_new
        self._shrink()

    def _write_sorted(
        self,
        addresses: array,
        values: bytes,
    ) -> None:
        # Writes strictly ascending entries, overwriting existing ones.
        size = len(values)
        if not size:
            return

        addrs = self._addresses
        data = self._data
        lo = bisect_left(addrs, addresses[0], 0, self._count)
        hi = bisect_right(addrs, addresses[-1], lo, self._count)

        if lo == hi:
            self._replace(lo, hi, addresses, values)
            return

        merged_addrs = array('Q')
        merged_data = bytearray()
        i = lo
        j = 0
        while i < hi and j < size:
            address_old = addrs[i]
            address_new = addresses[j]
            if address_old < address_new:
                merged_addrs.append(address_old)
                merged_data.append(data[i])
                i += 1
            else:
                merged_addrs.append(address_new)
                merged_data.append(values[j])
                j += 1
                if address_old == address_new:
                    i += 1

        merged_addrs.extend(addrs[i:hi])
        merged_data.extend(data[i:hi])
        merged_addrs.extend(addresses[j:])
        merged_data.extend(values[j:])
        self._replace(lo, hi, merged_addrs, merged_data)

    def release(
        self,
    ) -> None:
        r"""Releases the backing storage.

        All the entries are discarded, and the capacity drops to zero.
        """

        self._addresses = array('Q')
        self._data = bytearray()
        self._count = 0

    # ------------------------------------------------------------------------
    # Conversions

    @classmethod
    def from_blocks(
        cls: type,
        blocks: BlockList,
    ) -> _ImageSelf:
        r"""Creates an image from blocks.

        Arguments:
            blocks (list of blocks):
                Sequence of ``[start, data]`` blocks; later blocks overwrite
                earlier ones where they overlap.

        Returns:
            :obj:`MemoryImage`: Memory image.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'AB'], [5, b'x']])
            >>> list(image.keys())
            [1, 2, 5]
        """

        image = cls()
        for start, data in blocks:
            image.write(start, data)
        return image

    @classmethod
    def from_bytes(
        cls: type,
        data: bytes,
        offset: Address = 0,
    ) -> _ImageSelf:
        r"""Creates an image from a byte string.

        Arguments:
            data (bytes):
                Contiguous data.

            offset (int):
                Address of the first byte.

        Returns:
            :obj:`MemoryImage`: Memory image.
        """

        return cls.from_blocks([[offset, data]])

    @classmethod
    def from_items(
        cls: type,
        items: Iterable[MemoryEntry],
    ) -> _ImageSelf:
        r"""Creates an image from ``(address, value)`` pairs.

        Arguments:
            items (iterable of pairs):
                Entries, in any order; later ones overwrite earlier ones.

        Returns:
            :obj:`MemoryImage`: Memory image.
        """

        image = cls()
        for address, value in items:
            image.add_data(address, value)
        return image

    @classmethod
    def from_memory(
        cls: type,
        memory: Memory,
    ) -> _ImageSelf:
        r"""Creates an image from a :obj:`bytesparse.Memory`.

        Arguments:
            memory (:obj:`bytesparse.Memory`):
                Source memory.

        Returns:
            :obj:`MemoryImage`: Memory image.
        """

        return cls.from_blocks(memory.to_blocks())

    def to_blocks(
        self,
    ) -> BlockList:
        r"""Converts into blocks.

        Returns:
            list of blocks: ``[start, bytearray]`` of each block.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_items([(5, 0x78), (1, 0x41), (2, 0x42)])
            >>> image.to_blocks()
            [[1, bytearray(b'AB')], [5, bytearray(b'x')]]
        """

        return [[self._addresses[idx_start], bytearray(self._data[idx_start:idx_end + 1])]
                for idx_start, idx_end in self.blocks()]

    def to_memory(
        self,
    ) -> Memory:
        r"""Converts into a :obj:`bytesparse.Memory`.

        Returns:
            :obj:`bytesparse.Memory`: Equivalent memory object.
        """

        return Memory.from_blocks(self.to_blocks())

    # ------------------------------------------------------------------------
    # Inspection

    @property
    def content_start(
        self,
    ) -> Optional[Address]:
        r"""Lowest defined address; ``None`` if empty."""

        return self._addresses[0] if self._count else None

    @property
    def content_endin(
        self,
    ) -> Optional[Address]:
        r"""Highest defined address; ``None`` if empty."""

        return self._addresses[self._count - 1] if self._count else None

    @property
    def content_span(
        self,
    ) -> Optional[ClosedInterval]:
        r"""Lowest and highest defined addresses; ``None`` if empty."""

        if self._count:
            return self._addresses[0], self._addresses[self._count - 1]
        return None

    def entry(
        self,
        index: Index,
    ) -> MemoryEntry:
        r"""Gets the entry at some index.

        Arguments:
            index (int):
                Entry index.

        Returns:
            pair: ``(address, value)`` of the entry.

        Raises:
            :obj:`IndexError`: Index out of range.
        """

        if not 0 <= index < self._count:
            raise IndexError('index out of range')
        return self._addresses[index], self._data[index]

    def entries(
        self,
        idx_start: Index,
        idx_end: Index,
    ) -> Iterator[MemoryEntry]:
        r"""Iterates over an index range.

        Arguments:
            idx_start (int):
                First index (inclusive).

            idx_end (int):
                Last index (inclusive).

        Yields:
            pair: ``(address, value)`` of each entry.
        """

        idx_end = min(idx_end, self._count - 1)
        addrs = self._addresses
        data = self._data
        for index in range(max(idx_start, 0), idx_end + 1):
            yield addrs[index], data[index]

    def data_slice(
        self,
        idx_start: Index,
        idx_end: Index,
    ) -> bytes:
        r"""Data bytes of an index range (inclusive)."""

        idx_end = min(idx_end, self._count - 1)
        if idx_start > idx_end:
            return b''
        return bytes(self._data[idx_start:idx_end + 1])

    def items(
        self,
        start: Optional[Address] = None,
        end: Optional[Address] = None,
    ) -> Iterator[MemoryEntry]:
        r"""Iterates over the entries of an address window.

        Arguments:
            start (int):
                Start address (inclusive); ``None`` means no lower bound.

            end (int):
                End address (inclusive); ``None`` means no upper bound.

        Yields:
            pair: ``(address, value)`` of each defined byte, by address.
        """

        count = self._count
        addrs = self._addresses
        idx_start = 0 if start is None else bisect_left(addrs, start, 0, count)
        idx_endex = count if end is None else bisect_right(addrs, end, idx_start, count)
        yield from self.entries(idx_start, idx_endex - 1)

    def keys(
        self,
    ) -> Iterator[Address]:
        r"""Iterates over the defined addresses."""

        yield from self._addresses[:self._count]

    def values(
        self,
    ) -> Iterator[Value]:
        r"""Iterates over the defined values, by address."""

        yield from self._data[:self._count]

    # ------------------------------------------------------------------------
    # Point operations

    def add_data(
        self,
        address: Address,
        value: Value,
    ) -> None:
        r"""Sets the byte at some address.

        The entry is created if missing, or overwritten otherwise.

        Arguments:
            address (int):
                Address of the byte.

            value (int):
                Byte value.

        Raises:
            :obj:`ValueError`: Address or value overflow.

            :obj:`ImageSizeError`: Size guard exceeded.
        """

        check_address(address)
        _check_value(value)
        count = self._count
        addrs = self._addresses

        if count and addrs[count - 1] < address:
            index = count  # append
        else:
            index = bisect_left(addrs, address, 0, count)
            if index < count and addrs[index] == address:
                self._data[index] = value
                return

        self._reserve(count + 1)
        addrs = self._addresses
        data = self._data
        if index < count:
            addrs[index + 1:count + 1] = addrs[index:count]
            data[index + 1:count + 1] = data[index:count]
        addrs[index] = address
        data[index] = value
        self._count = count + 1

    def delete_data(
        self,
        address: Address,
    ) -> bool:
        r"""Deletes the byte at some address.

        Arguments:
            address (int):
                Address of the byte.

        Returns:
            bool: The address was defined, and it is now deleted.
        """

        count = self._count
        addrs = self._addresses
        index = bisect_left(addrs, address, 0, count)
        if index < count and addrs[index] == address:
            data = self._data
            addrs[index:count - 1] = addrs[index + 1:count]
            data[index:count - 1] = data[index + 1:count]
            self._count = count - 1
            self._shrink()
            return True
        return False

    def get_data(
        self,
        address: Address,
    ) -> Optional[Value]:
        r"""Gets the byte at some address.

        Arguments:
            address (int):
                Address of the byte.

        Returns:
            int: Byte value; ``None`` if undefined.
        """

        count = self._count
        addrs = self._addresses
        index = bisect_left(addrs, address, 0, count)
        if index < count and addrs[index] == address:
            return self._data[index]
        return None

    def get_index(
        self,
        address: Address,
    ) -> Index:
        r"""Finds the index of some address.

        Arguments:
            address (int):
                Address to look up.

        Returns:
            int: Index of the entry at `address` if defined, else index of the
            first entry with a higher address (``len(self)`` if none).

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'AB'], [5, b'x']])
            >>> image.get_index(2), image.get_index(3), image.get_index(9)
            (1, 2, 3)
        """

        return bisect_left(self._addresses, address, 0, self._count)

    def get_memory_block(
        self,
        address: Address,
    ) -> Optional[Tuple[Index, Index]]:
        r"""Finds the next block of consecutive addresses.

        Arguments:
            address (int):
                Search start address (inclusive).

        Returns:
            pair: First and last index (both inclusive) of the first maximal
            run of consecutive addresses at or after `address`; ``None`` if no
            entry exists there.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'ABC'], [5, b'xy']])
            >>> image.get_memory_block(0)
            (0, 2)
            >>> image.get_memory_block(2)
            (1, 2)
            >>> image.get_memory_block(4)
            (3, 4)
            >>> image.get_memory_block(7) is None
            True
        """

        count = self._count
        addrs = self._addresses
        idx_start = bisect_left(addrs, address, 0, count)
        if idx_start >= count:
            return None

        # address - index never decreases; it stays constant within a block
        key = addrs[idx_start] - idx_start
        lo = idx_start + 1
        hi = count
        while lo < hi:
            mid = (lo + hi) // 2
            if addrs[mid] - mid == key:
                lo = mid + 1
            else:
                hi = mid
        return idx_start, lo - 1

    def blocks(
        self,
    ) -> Iterator[Tuple[Index, Index]]:
        r"""Iterates over the blocks of consecutive addresses.

        Yields:
            pair: First and last index (both inclusive) of each block.
        """

        idx_start = 0
        count = self._count
        while idx_start < count:
            _, idx_end = self.get_memory_block(self._addresses[idx_start])
            yield idx_start, idx_end
            idx_start = idx_end + 1

    # ------------------------------------------------------------------------
    # Range operations

    def write(
        self,
        address: Address,
        data: bytes,
    ) -> None:
        r"""Writes contiguous data.

        Arguments:
            address (int):
                Address of the first byte.

            data (bytes):
                Byte values to write; existing bytes get overwritten.

        Raises:
            :obj:`ValueError`: Address overflow.

            :obj:`ImageSizeError`: Size guard exceeded.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'ABC']])
            >>> image.write(3, b'xy')
            >>> image.to_blocks()
            [[1, bytearray(b'ABxy')]]
        """

        size = len(data)
        if size:
            check_address(address)
            check_address(address + size - 1)
            self._write_sorted(array('Q', range(address, address + size)), bytes(data))

    def fill_value(
        self,
        start: Address,
        end: Address,
        value: Value,
    ) -> None:
        r"""Fills an address window with a fixed value.

        Arguments:
            start (int):
                Start address (inclusive).

            end (int):
                End address (inclusive).

            value (int):
                Byte value.

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

            :obj:`ImageSizeError`: Size guard exceeded.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'AB'], [5, b'x']])
            >>> image.fill_value(2, 4, 0xFF)
            >>> image.to_blocks()
            [[1, bytearray(b'A\xff\xff\xffx')]]
        """

        check_window(start, end)
        _check_value(value)
        self._fill(start, end, lambda size: bytes((value,)) * size)

    def fill_random(
        self,
        start: Address,
        end: Address,
        rng: Optional[random.Random] = None,
    ) -> None:
        r"""Fills an address window with pseudo-random values.

        Arguments:
            start (int):
                Start address (inclusive).

            end (int):
                End address (inclusive).

            rng (:obj:`random.Random`):
                Random generator; ``None`` uses the :mod:`random` module.

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

            :obj:`ImageSizeError`: Size guard exceeded.
        """

        check_window(start, end)
        getrandbits = random.getrandbits if rng is None else rng.getrandbits
        self._fill(start, end, lambda size: getrandbits(size * 8).to_bytes(size, 'little'))

    def _fill(
        self,
        start: Address,
        end: Address,
        make_values,
    ) -> None:

        count = self._count
        addrs = self._addresses
        idx_start = bisect_left(addrs, start, 0, count)
        idx_endex = bisect_right(addrs, end, idx_start, count)
        size = end - start + 1
        self._reserve(count - (idx_endex - idx_start) + size)
        self._replace(idx_start, idx_endex, range(start, end + 1), make_values(size))

    def clip(
        self,
        start: Address,
        end: Address,
    ) -> None:
        r"""Deletes all the bytes outside an address window.

        Arguments:
            start (int):
                Start address (inclusive).

            end (int):
                End address (inclusive).

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> image.clip(2, 5)
            >>> image.to_blocks()
            [[2, bytearray(b'BC')], [5, bytearray(b'x')]]
        """

        check_window(start, end)
        count = self._count
        addrs = self._addresses
        idx_start = bisect_left(addrs, start, 0, count)
        idx_endex = bisect_right(addrs, end, idx_start, count)
        self._replace(idx_endex, count, (), b'')
        self._replace(0, idx_start, (), b'')

    def cut(
        self,
        start: Address,
        end: Address,
    ) -> None:
        r"""Deletes all the bytes inside an address window.

        Arguments:
            start (int):
                Start address (inclusive).

            end (int):
                End address (inclusive).

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> image.cut(2, 5)
            >>> image.to_blocks()
            [[1, bytearray(b'A')], [6, bytearray(b'yz')]]
        """

        check_window(start, end)
        count = self._count
        addrs = self._addresses
        idx_start = bisect_left(addrs, start, 0, count)
        idx_endex = bisect_right(addrs, end, idx_start, count)
        self._replace(idx_start, idx_endex, (), b'')

    def clone(
        self,
        dest: Optional['MemoryImage'] = None,
    ) -> 'MemoryImage':
        r"""Deep copy.

        Arguments:
            dest (:obj:`MemoryImage`):
                Destination image, whose contents get replaced; ``None``
                creates a new image of the same class.

        Returns:
            :obj:`MemoryImage`: Independent copy (`dest` if provided).
        """

        if dest is None:
            dest = type(self)()
        if dest is not self:
            count = self._count
            dest._replace(0, dest._count, self._addresses[:count], bytes(self._data[:count]))
        return dest

    copy = clone

    def merge(
        self,
        dest: 'MemoryImage',
    ) -> None:
        r"""Merges into another image.

        Every byte defined here overwrites the same address of `dest`;
        addresses defined only within `dest` are left untouched.

        Arguments:
            dest (:obj:`MemoryImage`):
                Destination image.

        Raises:
            :obj:`ImageSizeError`: Size guard of `dest` exceeded.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> src = MemoryImage.from_blocks([[2, b'xy']])
            >>> dest = MemoryImage.from_blocks([[1, b'ABC']])
            >>> src.merge(dest)
            >>> dest.to_blocks()
            [[1, bytearray(b'Axy')]]
        """

        count = self._count
        dest._write_sorted(self._addresses[:count], bytes(self._data[:count]))

    def _snapshot(
        self,
        start: Address,
        end: Address,
        dest_start: Address,
    ) -> Tuple[array, bytes]:

        check_window(start, end)
        check_address(dest_start)
        check_address(dest_start + (end - start))
        count = self._count
        addrs = self._addresses
        idx_start = bisect_left(addrs, start, 0, count)
        idx_endex = bisect_right(addrs, end, idx_start, count)
        delta = dest_start - start
        moved = array('Q', (address + delta for address in addrs[idx_start:idx_endex]))
        return moved, bytes(self._data[idx_start:idx_endex])

    def copy_range(
        self,
        start: Address,
        end: Address,
        dest_start: Address,
    ) -> None:
        r"""Copies an address window to another address.

        Each byte defined within ``[start, end]`` is written at the same
        offset from `dest_start`. Undefined source bytes leave their
        destination unchanged. The source window is read completely before
        writing, so that overlapping windows are copied correctly.

        Arguments:
            start (int):
                Source start address (inclusive).

            end (int):
                Source end address (inclusive).

            dest_start (int):
                Destination start address.

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

            :obj:`ValueError`: Destination address overflow.

            :obj:`ImageSizeError`: Size guard exceeded.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'AB'], [4, b'x']])
            >>> image.copy_range(1, 4, 2)
            >>> image.to_blocks()
            [[1, bytearray(b'AABxx')]]
        """

        addresses, values = self._snapshot(start, end, dest_start)
        self._write_sorted(addresses, values)

    def move_range(
        self,
        start: Address,
        end: Address,
        dest_start: Address,
    ) -> None:
        r"""Moves an address window to another address.

        Like :meth:`copy_range`, but the source window is emptied beforehand,
        except for the destination bytes written by the move itself.

        Arguments:
            start (int):
                Source start address (inclusive).

            end (int):
                Source end address (inclusive).

            dest_start (int):
                Destination start address.

        Raises:
            :obj:`AddressRangeError`: `start` is higher than `end`.

            :obj:`ValueError`: Destination address overflow.

        Examples:
            >>> from hexmerger import MemoryImage
            >>> image = MemoryImage.from_blocks([[1, b'AB'], [4, b'x']])
            >>> image.move_range(1, 4, 2)
            >>> image.to_blocks()
            [[2, bytearray(b'AB')], [5, bytearray(b'x')]]
        """

        addresses, values = self._snapshot(start, end, dest_start)
        self.cut(start, end)
        self._write_sorted(addresses, values)

    # ------------------------------------------------------------------------
    # Checksums

    def checksum_crc32(
        self,
        idx_start: Optional[Index] = None,
        idx_end: Optional[Index] = None,
    ) -> int:
        r"""CRC32-IEEE over an index range.

        See :func:`hexmerger.checksums.crc32`.
        """

        return crc32(self, idx_start, idx_end)

    def checksum_fletcher16(
        self,
        idx_start: Optional[Index] = None,
        idx_end: Optional[Index] = None,
    ) -> int:
        r"""Fletcher-16 over an index range.

        See :func:`hexmerger.checksums.fletcher16`.
        """

        return fletcher16(self, idx_start, idx_end)
