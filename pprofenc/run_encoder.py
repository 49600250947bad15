#!/usr/bin/env python

# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
encode a YAML dump of captured traces into a pprof profile

A trace dump looks like:

  methods:
    1: {class: com.example.Foo, method: run, signature: '(I)V',
        file: Foo.java, lines: {4: 12}}
  traces:
    - {frames: [[4, 1], [-99, 0x7f0000001000]], attr: 0, count: 3}
  extra_frames:
    - {name: gc-time, value: 5}
  mappings:
    - {start: 0x7f0000000000, limit: 0x7f0000100000, name: /lib/libc.so.6}
  compiled_ranges:
    - {start: 0x7e0000000000, length: 4096, method_id: 1}

Frames are [lineno, method_id] pairs, innermost first.
"""

import sys

import yaml

from .configuration import Configuration
from .frames import CallFrame, FrameCount, StaticResolver, Trace
from .frames import TraceMultiset
from .memory_info import MemoryInfo
from .native import NativeProcessInfo
from .proto import serialize_and_clear_traces
from .utils import Timer, log, startLogger

__all__ = ['EncoderConfigurator', 'load_trace_dump', 'encode_trace_dump',
           'main']


class EncoderConfigurator(Configuration):
    """encode captured stack traces into a pprof profile"""

    options = [
        ('traces', {
            'help': 'YAML dump of the captured traces',
            'flags': ['-i', '--traces'],
            'required': 'a trace dump is required (--traces)'
        }),
        ('output', {
            'help': 'file to write the encoded profile to',
            'flags': ['-o', '--output'],
            'required': 'an output file is required (--output)'
        }),
        ('profile_type', {
            'help': 'profile type, e.g. cpu or wall',
            'default': 'cpu',
            'flags': ['-t', '--profileType']
        }),
        ('period_ns', {
            'help': 'sampling period in nanoseconds',
            'default': 10000000,
            'flags': ['--period']
        }),
        ('duration_ns', {
            'help': 'length of the collection window in nanoseconds',
            'default': 0,
            'flags': ['--duration']
        }),
        ('attributes', {
            'help': 'attribute string, in id order (repeatable)',
            'default': [],
            'flags': ['--attribute']
        }),
        ('debug', {
            'help': 'enable debug logging',
            'default': False,
            'flags': ['--debug']
        }),
    ]


def load_trace_dump(filename):
    with open(filename) as f:
        return yaml.safe_load(f) or {}


def encode_trace_dump(dump, profile_type, period_ns, duration_ns,
                      attributes=()):
    """encode a loaded trace dump; returns the serialized profile"""
    resolver = StaticResolver(dump.get('methods'))

    traces = TraceMultiset()
    for entry in dump.get('traces') or []:
        frames = [CallFrame(*frame) for frame in entry['frames']]
        traces.add(Trace(frames, entry.get('attr', 0)),
                   entry.get('count', 1))

    native_info = NativeProcessInfo(
        (m['start'], m['limit'], m['name'])
        for m in dump.get('mappings') or [])

    memory_info = MemoryInfo()
    native_info.register(memory_info)
    for compiled in dump.get('compiled_ranges') or []:
        memory_info.add_executable_memory_range(compiled['start'],
                                                compiled['length'],
                                                compiled['method_id'])

    extra_frames = [FrameCount(f['name'], f['value'])
                    for f in dump.get('extra_frames') or []]

    log.debug("encoding %d distinct traces, %d memory ranges",
              len(traces), memory_info.count())
    return serialize_and_clear_traces(resolver, native_info, profile_type,
                                      extra_frames, duration_ns, period_ns,
                                      traces, memory_info=memory_info,
                                      attribute_strings=attributes)


def main(args=sys.argv[1:]):

    # generate a configuration from command-line arguments
    conf = EncoderConfigurator(usage='%(prog)s [options] [config.yml ...]')
    options = conf.parse_args(args)
    startLogger('debug' if options.debug else 'info')

    timer = Timer()
    dump = load_trace_dump(options.traces)
    data = encode_trace_dump(dump, options.profile_type, options.period_ns,
                             options.duration_ns, options.attributes)
    with open(options.output, 'wb') as f:
        f.write(data)
    log.info("Wrote %d bytes to %s in %s", len(data), options.output,
             timer.elapsed())
    return 0

if __name__ == '__main__':
    sys.exit(main())
