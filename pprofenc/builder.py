# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
string and function tables for a pprof profile under construction
"""

from google.protobuf import message

from .profile_proto import Profile
from .utils import ProfileValidationError, SerializationError

__all__ = ['Builder']


class Builder(object):
    """
    owns a Profile message and the tables deduplicating its strings and
    functions. Ids are dense and start at 1 (0 for strings, where index 0 is
    always the empty string); they are only meaningful within one builder.
    """

    def __init__(self):
        self.profile = Profile()
        self._strings = ['']
        self._string_ids = {'': 0}
        self._function_ids = {}

    def string_id(self, string):
        string = string or ''
        index = self._string_ids.get(string)
        if index is None:
            index = len(self._strings)
            self._string_ids[string] = index
            self._strings.append(string)
        return index

    def function_id(self, name, system_name, filename, start_line):
        key = (name, system_name, filename, start_line)
        function_id = self._function_ids.get(key)
        if function_id is not None:
            return function_id

        function_id = len(self.profile.function) + 1
        self._function_ids[key] = function_id
        function = self.profile.function.add()
        function.id = function_id
        function.name = self.string_id(name)
        function.system_name = self.string_id(system_name)
        function.filename = self.string_id(filename)
        function.start_line = start_line
        return function_id

    def finalize(self):
        """copy the string table into the profile and validate it"""
        del self.profile.string_table[:]
        self.profile.string_table.extend(self._strings)
        self.check_valid()
        return self.profile

    def emit(self):
        """serialize the profile; raises instead of emitting a partial one"""
        profile = self.finalize()
        try:
            return profile.SerializeToString()
        except (message.EncodeError, ValueError) as e:
            raise SerializationError("could not serialize profile: %s" % e)

    def check_valid(self):
        profile = self.profile
        strings = len(profile.string_table)

        def check_string(index, what):
            if index < 0 or index >= strings:
                raise ProfileValidationError(
                    "%s refers to string %d, table has %d entries"
                    % (what, index, strings))

        def check_ids(entries, what):
            ids = set()
            for entry in entries:
                if entry.id == 0:
                    raise ProfileValidationError("%s with id 0" % what)
                if entry.id in ids:
                    raise ProfileValidationError(
                        "duplicate %s id %d" % (what, entry.id))
                ids.add(entry.id)
            return ids

        if strings == 0 or profile.string_table[0] != '':
            raise ProfileValidationError(
                "string table must start with the empty string")

        function_ids = check_ids(profile.function, 'function')
        for function in profile.function:
            check_string(function.name, 'function %d name' % function.id)
            check_string(function.system_name,
                         'function %d system name' % function.id)
            check_string(function.filename,
                         'function %d filename' % function.id)

        mapping_ids = check_ids(profile.mapping, 'mapping')
        for mapping in profile.mapping:
            check_string(mapping.filename, 'mapping %d filename' % mapping.id)

        location_ids = check_ids(profile.location, 'location')
        for location in profile.location:
            if location.mapping_id and location.mapping_id not in mapping_ids:
                raise ProfileValidationError(
                    "location %d refers to unknown mapping %d"
                    % (location.id, location.mapping_id))
            for line in location.line:
                if line.function_id not in function_ids:
                    raise ProfileValidationError(
                        "location %d refers to unknown function %d"
                        % (location.id, line.function_id))

        for value_type in profile.sample_type:
            check_string(value_type.type, 'sample type')
            check_string(value_type.unit, 'sample unit')

        for sample in profile.sample:
            if len(sample.value) != len(profile.sample_type):
                raise ProfileValidationError(
                    "sample has %d values, profile declares %d sample types"
                    % (len(sample.value), len(profile.sample_type)))
            for location_id in sample.location_id:
                if location_id not in location_ids:
                    raise ProfileValidationError(
                        "sample refers to unknown location %d" % location_id)
            for label in sample.label:
                check_string(label.key, 'label key')
                check_string(label.str, 'label value')
