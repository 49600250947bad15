# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
message classes for the pprof profile format (perftools.profiles)

The descriptors mirror profile.proto field for field and live in a private
descriptor pool.
"""

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool
from google.protobuf import message_factory

__all__ = ['Profile', 'ValueType', 'Sample', 'Label', 'Mapping',
           'Location', 'Line', 'Function']

PACKAGE = 'perftools.profiles'

_field = descriptor_pb2.FieldDescriptorProto
_INT64 = _field.TYPE_INT64
_UINT64 = _field.TYPE_UINT64
_BOOL = _field.TYPE_BOOL
_STRING = _field.TYPE_STRING
_MESSAGE = _field.TYPE_MESSAGE
_REPEATED = _field.LABEL_REPEATED
_OPTIONAL = _field.LABEL_OPTIONAL

# (message name, [(field name, number, type, repeated, message type)])
messages = [
    ('Profile', [
        ('sample_type', 1, _MESSAGE, True, 'ValueType'),
        ('sample', 2, _MESSAGE, True, 'Sample'),
        ('mapping', 3, _MESSAGE, True, 'Mapping'),
        ('location', 4, _MESSAGE, True, 'Location'),
        ('function', 5, _MESSAGE, True, 'Function'),
        ('string_table', 6, _STRING, True, None),
        ('drop_frames', 7, _INT64, False, None),
        ('keep_frames', 8, _INT64, False, None),
        ('time_nanos', 9, _INT64, False, None),
        ('duration_nanos', 10, _INT64, False, None),
        ('period_type', 11, _MESSAGE, False, 'ValueType'),
        ('period', 12, _INT64, False, None),
        ('comment', 13, _INT64, True, None),
        ('default_sample_type', 14, _INT64, False, None),
    ]),
    ('ValueType', [
        ('type', 1, _INT64, False, None),
        ('unit', 2, _INT64, False, None),
    ]),
    ('Sample', [
        ('location_id', 1, _UINT64, True, None),
        ('value', 2, _INT64, True, None),
        ('label', 3, _MESSAGE, True, 'Label'),
    ]),
    ('Label', [
        ('key', 1, _INT64, False, None),
        ('str', 2, _INT64, False, None),
        ('num', 3, _INT64, False, None),
        ('num_unit', 4, _INT64, False, None),
    ]),
    ('Mapping', [
        ('id', 1, _UINT64, False, None),
        ('memory_start', 2, _UINT64, False, None),
        ('memory_limit', 3, _UINT64, False, None),
        ('file_offset', 4, _UINT64, False, None),
        ('filename', 5, _INT64, False, None),
        ('build_id', 6, _INT64, False, None),
        ('has_functions', 7, _BOOL, False, None),
        ('has_filenames', 8, _BOOL, False, None),
        ('has_line_numbers', 9, _BOOL, False, None),
        ('has_inline_frames', 10, _BOOL, False, None),
    ]),
    ('Location', [
        ('id', 1, _UINT64, False, None),
        ('mapping_id', 2, _UINT64, False, None),
        ('address', 3, _UINT64, False, None),
        ('line', 4, _MESSAGE, True, 'Line'),
        ('is_folded', 5, _BOOL, False, None),
    ]),
    ('Line', [
        ('function_id', 1, _UINT64, False, None),
        ('line', 2, _INT64, False, None),
    ]),
    ('Function', [
        ('id', 1, _UINT64, False, None),
        ('name', 2, _INT64, False, None),
        ('system_name', 3, _INT64, False, None),
        ('filename', 4, _INT64, False, None),
        ('start_line', 5, _INT64, False, None),
    ]),
]


def file_descriptor():
    """the FileDescriptorProto for profile.proto"""
    proto = descriptor_pb2.FileDescriptorProto(name='profile.proto',
                                               package=PACKAGE,
                                               syntax='proto3')
    for name, fields in messages:
        message = proto.message_type.add(name=name)
        for field_name, number, field_type, repeated, type_name in fields:
            field = message.field.add(name=field_name,
                                      number=number,
                                      type=field_type,
                                      label=_REPEATED if repeated
                                      else _OPTIONAL)
            if type_name:
                field.type_name = '.%s.%s' % (PACKAGE, type_name)
    return proto


pool = descriptor_pool.DescriptorPool()
pool.AddSerializedFile(file_descriptor().SerializeToString())


def _message_class(name):
    return message_factory.GetMessageClass(
        pool.FindMessageTypeByName('%s.%s' % (PACKAGE, name)))


Profile = _message_class('Profile')
ValueType = _message_class('ValueType')
Sample = _message_class('Sample')
Label = _message_class('Label')
Mapping = _message_class('Mapping')
Location = _message_class('Location')
Line = _message_class('Line')
Function = _message_class('Function')
