#!/usr/bin/env python

"""
test native mapping snapshots
"""

import os
import unittest

import mozinfo

from pprofenc.memory_info import NATIVE, MemoryInfo
from pprofenc.native import NativeMapping, NativeProcessInfo, parse_maps

maps = """\
00400000-0040b000 r-xp 00000000 08:01 131090     /usr/bin/cat
0060a000-0060b000 r--p 0000a000 08:01 131090     /usr/bin/cat
01b2c000-01b4d000 rw-p 00000000 00:00 0          [heap]
7f1c2e400000-7f1c2e5a1000 r-xp 00000000 08:01 1234       /usr/lib/lib with space.so
7f1c2e5a1000-7f1c2e7a1000 ---p 001a1000 08:01 1234       /usr/lib/lib with space.so
7ffd5d5e0000-7ffd5d5e2000 r-xp 00000000 00:00 0          [vdso]
7f1c2e800000-7f1c2e801000 r-xp 00000000 00:00 0
"""


class TestNativeProcessInfo(unittest.TestCase):

    def test_parse_maps(self):
        mappings = parse_maps(maps)
        self.assertEqual(mappings, [
            NativeMapping(0x00400000, 0x0040b000, '/usr/bin/cat'),
            NativeMapping(0x7f1c2e400000, 0x7f1c2e5a1000,
                          '/usr/lib/lib with space.so'),
        ])

    def test_register(self):
        info = NativeProcessInfo(parse_maps(maps))
        self.assertEqual(len(info.mappings()), 2)
        memory_info = MemoryInfo()
        info.register(memory_info)
        self.assertEqual(memory_info.count(), 2)
        interval = memory_info.get_memory_interval(0x7f1c2e400010)
        self.assertEqual(interval.interval_type, NATIVE)
        self.assertEqual(interval.name, '/usr/lib/lib with space.so')

    def test_empty(self):
        self.assertEqual(NativeProcessInfo().mappings(), ())

    @unittest.skipUnless(mozinfo.isLinux, "reads /proc")
    def test_from_pid(self):
        info = NativeProcessInfo.from_pid(os.getpid())
        self.assertTrue(info.mappings())
        for mapping in info.mappings():
            self.assertTrue(mapping.limit > mapping.start)
            self.assertTrue(mapping.name.startswith('/'))

if __name__ == '__main__':
    unittest.main()
