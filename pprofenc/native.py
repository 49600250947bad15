# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""native library mappings of a process"""

import os
from collections import namedtuple

import mozinfo

from .utils import log

__all__ = ['NativeMapping', 'NativeProcessInfo', 'parse_maps']

NativeMapping = namedtuple('NativeMapping', 'start limit name')


def parse_maps(text):
    """
    parse the contents of /proc/<pid>/maps, keeping executable mappings
    backed by a file:

      7f1c2e400000-7f1c2e5a1000 r-xp 00000000 08:01 1234  /usr/lib/libc.so.6
    """
    mappings = []
    for line in text.splitlines():
        fields = line.split(None, 5)
        if len(fields) < 6:
            # anonymous mapping
            continue
        addresses, perms, name = fields[0], fields[1], fields[5].strip()
        if 'x' not in perms or not name.startswith('/'):
            continue
        try:
            start, limit = [int(i, 16) for i in addresses.split('-', 1)]
        except ValueError:
            log.debug("skipping malformed maps line: %s", line)
            continue
        mappings.append(NativeMapping(start, limit, name))
    return mappings


class NativeProcessInfo(object):
    """immutable snapshot of the native mappings of a process"""

    def __init__(self, mappings=()):
        self._mappings = tuple(NativeMapping(*m) for m in mappings)

    @classmethod
    def from_pid(cls, pid=None):
        if pid is None:
            pid = os.getpid()
        if not mozinfo.isLinux:
            log.debug("no native mappings available on %s", mozinfo.os)
            return cls()
        path = '/proc/%d/maps' % pid
        with open(path) as f:
            mappings = parse_maps(f.read())
        log.debug("read %d native mappings from %s", len(mappings), path)
        return cls(mappings)

    def mappings(self):
        return self._mappings

    def register(self, memory_info):
        """add every mapping to `memory_info` as a native range"""
        for mapping in self._mappings:
            if mapping.limit > mapping.start:
                memory_info.add_native_memory_range(
                    mapping.start, mapping.limit - mapping.start,
                    mapping.name)
