# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
registry of executable memory ranges

Compiled (JIT) code regions and native library regions are registered here
by the code load/unload notifiers and looked up by address when encoding
frames that only carry an address.

Ranges may overlap. A lookup returns the smallest range enclosing the
address; between ranges of equal length the most recently inserted wins.
"""

import bisect
import itertools
import threading
from collections import namedtuple

from .utils import log

__all__ = ['COMPILED_CODE', 'NATIVE', 'MemoryInterval', 'MemoryInfo']

COMPILED_CODE = 'compiled_code'
NATIVE = 'native'


class MemoryInterval(namedtuple('MemoryInterval',
                                'start length interval_type method_id name')):
    """one registered range; the default instance is the "not found" value"""

    __slots__ = ()

    def __new__(cls, start=0, length=0, interval_type=COMPILED_CODE,
                method_id=0, name=''):
        return super(MemoryInterval, cls).__new__(
            cls, start, length, interval_type, method_id, name)

    def __bool__(self):
        return self.length > 0

    @property
    def end(self):
        return self.start + self.length

    def contains(self, point):
        return point >= self.start and point - self.start < self.length


def _owned_name(name):
    if isinstance(name, (bytes, bytearray)):
        return bytes(name).decode('utf-8', 'replace')
    return str(name)


class MemoryInfo(object):
    """thread-safe set of address ranges"""

    def __init__(self):
        self._lock = threading.Lock()
        # parallel lists sorted by (start, insertion sequence)
        self._keys = []
        self._intervals = []
        self._sequence = itertools.count()
        # upper bound on the length of any tracked range, bounds the lookup scan
        self._max_length = 0

    def add_executable_memory_range(self, start, length, method_id):
        self._insert(MemoryInterval(start, length, COMPILED_CODE, method_id))

    def add_native_memory_range(self, start, length, name):
        self._insert(MemoryInterval(start, length, NATIVE,
                                    name=_owned_name(name)))

    def remove_executable_memory_range(self, start, method_id):
        """remove the first compiled range at `start` for `method_id`;
        returns whether a range was removed"""
        return self._remove(start, lambda interval:
                            interval.interval_type == COMPILED_CODE and
                            interval.method_id == method_id)

    def remove_native_memory_range(self, start, name):
        name = _owned_name(name)
        return self._remove(start, lambda interval:
                            interval.interval_type == NATIVE and
                            interval.name == name)

    def get_memory_interval(self, point):
        with self._lock:
            best = None
            best_sequence = -1
            index = bisect.bisect_right(self._keys, (point, float('inf')))
            while index > 0:
                index -= 1
                start, sequence = self._keys[index]
                if point - start >= self._max_length:
                    break
                interval = self._intervals[index]
                if not interval.contains(point):
                    continue
                if (best is None or interval.length < best.length or
                        (interval.length == best.length and
                         sequence > best_sequence)):
                    best, best_sequence = interval, sequence
        if best is None:
            return MemoryInterval()
        return best

    def count(self):
        with self._lock:
            return len(self._intervals)

    def _insert(self, interval):
        if interval.length <= 0:
            raise ValueError("memory range at 0x%x has non-positive length %r"
                             % (interval.start, interval.length))
        with self._lock:
            key = (interval.start, next(self._sequence))
            index = bisect.bisect_right(self._keys, key)
            self._keys.insert(index, key)
            self._intervals.insert(index, interval)
            self._max_length = max(self._max_length, interval.length)

    def _remove(self, start, match):
        with self._lock:
            index = bisect.bisect_left(self._keys, (start,))
            while index < len(self._keys) and self._keys[index][0] == start:
                if match(self._intervals[index]):
                    del self._keys[index]
                    del self._intervals[index]
                    return True
                index += 1
        log.debug("no memory range to remove at 0x%x", start)
        return False
