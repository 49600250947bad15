# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""display names for resolved frames"""

import re

__all__ = ['fix_method_parameters', 'simplify_function_name',
           'unresolved_method_name']

primitive_types = {'B': 'byte',
                   'C': 'char',
                   'D': 'double',
                   'F': 'float',
                   'I': 'int',
                   'J': 'long',
                   'S': 'short',
                   'V': 'void',
                   'Z': 'boolean'}


def _parse_type(descriptor, index):
    """parse one field descriptor starting at `index`;
    returns (type name, index past the descriptor)"""
    dimensions = 0
    while index < len(descriptor) and descriptor[index] == '[':
        dimensions += 1
        index += 1
    if index >= len(descriptor):
        raise ValueError("truncated descriptor: %r" % descriptor)
    code = descriptor[index]
    if code == 'L':
        end = descriptor.find(';', index)
        if end == -1:
            raise ValueError("unterminated class in descriptor: %r"
                             % descriptor)
        name = descriptor[index + 1:end].replace('/', '.')
        index = end + 1
    elif code in primitive_types:
        name = primitive_types[code]
        index += 1
    else:
        raise ValueError("unknown type %r in descriptor: %r"
                         % (code, descriptor))
    return name + '[]' * dimensions, index


def fix_method_parameters(signature):
    """
    turn a method descriptor into a readable parameter list:

      (ILjava/lang/String;[J)V -> (int, java.lang.String, long[])

    The return type is dropped. Anything that is not a descriptor is
    returned unchanged.
    """
    if not signature.startswith('('):
        return signature
    end = signature.find(')')
    if end == -1:
        return signature
    parameters = []
    index = 1
    try:
        while index < end:
            name, index = _parse_type(signature, index)
            parameters.append(name)
    except ValueError:
        return signature
    return '(%s)' % ', '.join(parameters)


def simplify_function_name(name):
    """
    drop the parameter list and the package from a full frame name:

      com.example.Foo$Bar.run(int) -> Foo$Bar.run
    """
    name = re.sub(r'\(.*\)$', '', name)
    parts = name.split('.')
    if len(parts) <= 2:
        return name
    return '.'.join(parts[-2:])


def unresolved_method_name(method_id):
    """placeholder name for a method the resolver has no symbol for"""
    if isinstance(method_id, int):
        return '[unresolved 0x%x]' % method_id
    return '[unresolved %s]' % method_id
