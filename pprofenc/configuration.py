# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this file,
# You can obtain one at http://mozilla.org/MPL/2.0/.

"""
declarative encoder configuration, read from YAML files and the command line
"""

import argparse
import os

import yaml

__all__ = ['Configuration',
           'UnknownOptionException',
           'MissingValueException',
           'TypeCastException']


class UnknownOptionException(Exception):
    """a configuration names an option that is not declared"""


class MissingValueException(Exception):
    """a required option has no value"""


class TypeCastException(Exception):
    """an option value cannot be coerced to the option's type"""


def read_yaml(filename):
    with open(filename) as f:
        return yaml.safe_load(f)


def write_yaml(config, filename):
    with open(filename, 'w') as f:
        f.write(yaml.safe_dump(config, default_flow_style=False))


class Configuration(argparse.ArgumentParser):
    """
    argument parser driven by an `options` list of (name, dict) pairs

    Each option may carry `help`, `flags`, `default`, `type` and `required` (a
    message, or True). The option type, given or taken from the default,
    selects the command line action: flags for bool, repeated values for
    list, integers for int.

    Values are merged in order: defaults, YAML files given as positional
    arguments, then the command line.
    """

    options = []

    def __init__(self, **parser_args):
        self.option_dict = dict(self.options)
        self.config = {}
        parser_args.setdefault('description', self.__doc__)
        argparse.ArgumentParser.__init__(self, **parser_args)

        for name, value in self.options:
            self.add_argument(*value.get('flags', ['--%s' % name]),
                              **self._argument(name, value))
        self.add_argument('configuration_files', nargs='*',
                          help="YAML configuration files")
        self.add_argument('--dump', dest='dump',
                          help="write the resulting configuration as YAML")

    def option_type(self, name):
        value = self.option_dict[name]
        if 'type' in value:
            return value['type']
        if value.get('default') is not None:
            return type(value['default'])

    def _argument(self, name, value):
        # argparse defaults stay None so set values can be told apart
        kw = {'dest': name, 'default': None}
        help = value.get('help', name)
        if 'default' in value:
            help += ' [DEFAULT: %s]' % value['default']
        kw['help'] = help

        _type = self.option_type(name)
        if _type is bool:
            kw['action'] = 'store_true'
        elif _type is list:
            kw['action'] = 'append'
        elif _type is int:
            kw['type'] = int
        return kw

    def check(self, config):
        """reject unknown options and coerce values to their types"""
        unknown = [key for key in config if key not in self.option_dict]
        if unknown:
            raise UnknownOptionException(
                "Unknown options: %s" % ', '.join(sorted(unknown)))

        for key, value in config.items():
            _type = self.option_type(key)
            if _type is None or isinstance(value, _type):
                continue
            try:
                config[key] = _type(value)
            except (TypeError, ValueError) as e:
                raise TypeCastException(
                    "Could not coerce %s, %s, to type %s: %s"
                    % (key, value, _type.__name__, e))
        return config

    def validate(self):
        for key, value in self.options:
            required = value.get('required')
            if required and key not in self.config:
                if not isinstance(required, str):
                    required = "Parameter %s is required but not present" % key
                raise MissingValueException(required)

    def default_config(self):
        defaults = {}
        for key, value in self.options:
            if 'default' in value:
                default = value['default']
                if isinstance(default, list):
                    default = list(default)
                defaults[key] = default
        return defaults

    def __call__(self, *configs):
        """merge `configs` over the defaults; returns the configuration"""
        self.config = self.default_config()
        for config in configs:
            self.config.update(self.check(dict(config)))
        self.validate()
        return self.config

    def parse_args(self, *args, **kw):
        args = argparse.ArgumentParser.parse_args(self, *args, **kw)

        configs = []
        missing = [f for f in args.configuration_files
                   if not os.path.exists(f)]
        if missing:
            self.error("Missing files: %s" % ', '.join(missing))
        for f in args.configuration_files:
            try:
                loaded = read_yaml(f)
            except (yaml.YAMLError, EnvironmentError) as e:
                self.error(str(e))
            if loaded and not isinstance(loaded, dict):
                self.error("%s does not hold a mapping of options" % f)
            if loaded:
                configs.append(loaded)
        configs.append(dict((key, getattr(args, key))
                            for key in self.option_dict
                            if getattr(args, key) is not None))

        try:
            self(*configs)
        except (MissingValueException, UnknownOptionException,
                TypeCastException) as e:
            self.error(str(e))

        if args.dump:
            write_yaml(self.config, args.dump)

        args.__dict__.update(self.config)
        return args
