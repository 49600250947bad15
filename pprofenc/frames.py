# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
captured stack traces and the collaborators that describe them
"""

from collections import namedtuple

__all__ = ['NATIVE_FRAME_LINE_NUM',
           'CallFrame',
           'Trace',
           'TraceMultiset',
           'FrameCount',
           'StackFrameElements',
           'StaticResolver',
           'AttributeTable']

# line number the sampler stores in frames that only carry an address
NATIVE_FRAME_LINE_NUM = -99


class CallFrame(namedtuple('CallFrame', 'lineno method_id')):
    """
    one stack entry as delivered by the sampler

    For a native frame `lineno` is NATIVE_FRAME_LINE_NUM and `method_id` is
    the code address. Otherwise `method_id` identifies the method and
    `lineno` is the program counter within it. A native address that falls in
    a compiled-code range is resolved with the offset from the range start
    as its program counter.
    """

    __slots__ = ()

    @classmethod
    def native(cls, address):
        return cls(NATIVE_FRAME_LINE_NUM, address)

    @property
    def is_native(self):
        return self.lineno == NATIVE_FRAME_LINE_NUM

    @property
    def address(self):
        return self.method_id


class Trace(namedtuple('Trace', 'frames attr')):
    """ordered frames, innermost first, plus a caller-supplied attribute"""

    __slots__ = ()

    def __new__(cls, frames, attr=0):
        return super(Trace, cls).__new__(cls, tuple(frames), attr)


class TraceMultiset(object):
    """trace -> occurrence count"""

    def __init__(self, traces=None):
        self._counts = {}
        if traces:
            for trace, count in dict(traces).items():
                self.set(trace, count)

    def add(self, trace, count=1):
        self._counts[trace] = self._counts.get(trace, 0) + count

    def set(self, trace, count):
        self._counts[trace] = count

    def get(self, trace):
        return self._counts.get(trace, 0)

    def items(self):
        return self._counts.items()

    def clear(self):
        self._counts.clear()

    def __iter__(self):
        return iter(self._counts.items())

    def __len__(self):
        return len(self._counts)


# an extra synthetic counter, e.g. time spent in GC
FrameCount = namedtuple('FrameCount', 'name value')

StackFrameElements = namedtuple('StackFrameElements',
                                'file_name class_name method_name signature'
                                ' line_number')

_MISSING = StackFrameElements('', '', '', '', 0)


class StaticResolver(object):
    """
    resolves frames from a table of known methods

    `methods` maps a method identity to a dict with the keys
    `class`, `method`, `signature`, `file` and `lines`, the last one mapping
    a program counter to a source line. For compiled code reached through a
    native address the program counter is the offset into the compiled
    range. Unknown methods resolve to empty strings.
    """

    def __init__(self, methods=None):
        self.methods = dict(methods or {})

    def add(self, method_id, class_name, method_name, signature='',
            file_name='', lines=None):
        self.methods[method_id] = {'class': class_name,
                                   'method': method_name,
                                   'signature': signature,
                                   'file': file_name,
                                   'lines': dict(lines or {})}

    def __call__(self, method_id, pc):
        method = self.methods.get(method_id)
        if method is None:
            return _MISSING
        lines = method.get('lines') or {}
        return StackFrameElements(method.get('file', ''),
                                  method.get('class', ''),
                                  method.get('method', ''),
                                  method.get('signature', ''),
                                  lines.get(pc, 0))


class AttributeTable(object):
    """
    vocabulary of attribute strings

    Ids start at 1; 0 means "no attribute". An encoder registers the strings
    in order right after the empty string, so an attribute id is also the
    index of its string in the profile string table.
    """

    def __init__(self, strings=()):
        self._strings = []
        self._ids = {}
        for string in strings:
            self.register_string(string)

    def register_string(self, string):
        if not string:
            raise ValueError("attribute strings must not be empty")
        if string in self._ids:
            return self._ids[string]
        self._strings.append(string)
        self._ids[string] = len(self._strings)
        return self._ids[string]

    def get_strings(self):
        return list(self._strings)

    def __iter__(self):
        return iter(self._strings)

    def __len__(self):
        return len(self._strings)
