# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
encodes a multiset of captured stack traces into a pprof profile
"""

import bisect

from .builder import Builder
from .display import fix_method_parameters, simplify_function_name
from .display import unresolved_method_name
from .frames import AttributeTable
from .memory_info import COMPILED_CODE
from .utils import log

__all__ = ['ProfileProtoBuilder', 'serialize_and_clear_traces']


class ProfileProtoBuilder(object):
    """
    Encodes a set of stack traces into a CPU profile.

    - resolver : callable (method_id, pc) -> StackFrameElements
    - native_info : NativeProcessInfo whose mappings are emitted
    - attribute_strings : AttributeTable (or iterable of strings) whose
      ids are used as sample attributes
    - memory_info : optional MemoryInfo used to classify native addresses

    An instance encodes a single collection window and is not thread-safe.
    """

    def __init__(self, resolver, native_info, attribute_strings=(),
                 memory_info=None):
        self.resolver = resolver
        self.native_info = native_info
        self.memory_info = memory_info
        self._builder = Builder()
        self._total_count = 0
        self._total_weight = 0
        self._line_locations = {}  # (function id, line) -> location id
        self._address_locations = {}  # address -> location id

        if not isinstance(attribute_strings, AttributeTable):
            attribute_strings = AttributeTable(attribute_strings)
        for string in attribute_strings.get_strings():
            self._builder.string_id(string)
        self._attribute_count = len(attribute_strings)

    def populate(self, profile_type, traces, duration_ns, period_ns):
        """add every trace with a non-zero count, then the native mappings"""
        profile = self._builder.profile
        string_id = self._builder.string_id

        profile.period_type.type = string_id(profile_type)
        profile.period_type.unit = string_id('nanoseconds')
        profile.period = period_ns

        sample_type = profile.sample_type.add()
        sample_type.type = string_id('sample')
        sample_type.unit = string_id('count')
        sample_type = profile.sample_type.add()
        sample_type.type = string_id(profile_type)
        sample_type.unit = string_id('nanoseconds')

        profile.duration_nanos = duration_ns

        for trace, count in traces.items():
            if count == 0:
                continue
            locations = [self.location_id(frame) for frame in trace.frames]
            self._add_sample(locations, count, count * period_ns, trace.attr)

        for mapping in self.native_info.mappings():
            m = profile.mapping.add()
            m.id = len(profile.mapping)
            m.memory_start = mapping.start
            m.memory_limit = mapping.limit
            m.filename = string_id(mapping.name)
        self._assign_mappings()

    def add_artificial_sample(self, name, count, weight, attr):
        """record a counter that is not a captured stack as a single frame
        named `name`"""
        locations = [self._line_location_id('', name, '', '', 0)]
        self._add_sample(locations, count, weight, attr)

    def total_count(self):
        return self._total_count

    def total_weight(self):
        return self._total_weight

    def emit(self):
        return self._builder.emit()

    def encode(self):
        """the finalized Profile message"""
        return self._builder.finalize()

    def location_id(self, frame):
        if frame.is_native:
            return self._native_location_id(frame.address)

        elements = self.resolver(frame.method_id, frame.lineno)
        if not elements.class_name and not elements.method_name:
            # unresolvable, one placeholder function per method
            return self._line_location_id(
                '', unresolved_method_name(frame.method_id), '', '', 0)
        return self._line_location_id(elements.class_name,
                                      elements.method_name,
                                      fix_method_parameters(elements.signature),
                                      elements.file_name,
                                      elements.line_number)

    def _native_location_id(self, address):
        if self.memory_info is not None:
            interval = self.memory_info.get_memory_interval(address)
            if interval and interval.interval_type == COMPILED_CODE:
                elements = self.resolver(interval.method_id,
                                         address - interval.start)
                if elements.class_name or elements.method_name:
                    return self._line_location_id(
                        elements.class_name,
                        elements.method_name,
                        fix_method_parameters(elements.signature),
                        elements.file_name,
                        elements.line_number)
        return self._address_location_id(address)

    def _address_location_id(self, address):
        location_id = self._address_locations.get(address)
        if location_id is not None:
            return location_id

        profile = self._builder.profile
        location_id = len(profile.location) + 1
        self._address_locations[address] = location_id
        location = profile.location.add()
        location.id = location_id
        location.address = address
        return location_id

    def _line_location_id(self, class_name, method_name, signature,
                          file_name, line_number):
        frame_name = ''
        if class_name:
            frame_name = class_name + '.'
        frame_name += method_name
        if signature:
            frame_name += signature

        function_id = self._builder.function_id(
            simplify_function_name(frame_name), frame_name, file_name, 0)

        key = (function_id, line_number)
        location_id = self._line_locations.get(key)
        if location_id is not None:
            return location_id

        profile = self._builder.profile
        location_id = len(profile.location) + 1
        self._line_locations[key] = location_id
        location = profile.location.add()
        location.id = location_id
        line = location.line.add()
        line.function_id = function_id
        line.line = line_number
        return location_id

    def _add_sample(self, locations, count, weight, attr):
        sample = self._builder.profile.sample.add()
        sample.value.append(count)
        self._total_count += count
        sample.value.append(weight)
        self._total_weight += weight
        sample.location_id.extend(locations)

        if attr != 0:
            label = sample.label.add()
            label.key = self._builder.string_id('attr')
            if 0 < attr <= self._attribute_count:
                label.str = attr
            else:
                # not a registered attribute string
                label.num = attr

    def _assign_mappings(self):
        """point address-only locations at the mapping containing them"""
        mappings = sorted(self._builder.profile.mapping,
                          key=lambda m: m.memory_start)
        if not mappings or not self._address_locations:
            return
        starts = [m.memory_start for m in mappings]
        locations = self._builder.profile.location
        for address, location_id in self._address_locations.items():
            index = bisect.bisect_right(starts, address) - 1
            if index >= 0 and address < mappings[index].memory_limit:
                locations[location_id - 1].mapping_id = mappings[index].id


def serialize_and_clear_traces(resolver, native_info, profile_type,
                               extra_frames, duration_ns, period_ns, traces,
                               memory_info=None, attribute_strings=()):
    """
    encode `traces` plus the synthetic `extra_frames` counters and return
    the serialized profile. `traces` is cleared once its frames have been
    consumed, before serialization.
    """
    b = ProfileProtoBuilder(resolver, native_info,
                            attribute_strings=attribute_strings,
                            memory_info=memory_info)
    b.populate(profile_type, traces, duration_ns, period_ns)
    for f in extra_frames:
        # TODO: carry attributes through FrameCount once the sampler reports
        # them for synthetic counters
        b.add_artificial_sample(f.name, f.value, f.value * period_ns, 0)
    log.info("Collected a profile: total count=%d, weight=%d",
             b.total_count(), b.total_weight())

    traces.clear()
    return b.emit()
