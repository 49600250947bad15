#!/usr/bin/env python

"""
test the encoder configuration and command line
"""

import os
import shutil
import tempfile
import unittest

import yaml

from pprofenc import run_encoder
from pprofenc.configuration import MissingValueException, TypeCastException
from pprofenc.configuration import UnknownOptionException
from pprofenc.profile_proto import Profile
from pprofenc.run_encoder import EncoderConfigurator

dump = """\
methods:
  1: {class: com.example.Foo, method: run, signature: '(I)V',
      file: Foo.java, lines: {0: 10, 4: 12}}
traces:
  - {frames: [[0, 1], [-99, 0x7f0000000100]], attr: 1, count: 3}
  - {frames: [[4, 1]], count: 2}
  - {frames: [[0x5010, 1]], count: 0}
extra_frames:
  - {name: gc-time, value: 5}
mappings:
  - {start: 0x7f0000000000, limit: 0x7f0000100000, name: /lib/libc.so.6}
compiled_ranges:
  - {start: 0x5000, length: 256, method_id: 1}
"""


class TestEncoderConfigurator(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def path(self, name):
        return os.path.join(self.tempdir, name)

    def test_cli(self):
        conf = EncoderConfigurator()
        outfile = self.path('config.yml')
        args = conf.parse_args(['-i', 'traces.yml', '-o', 'out.pb',
                                '--period', '20000000',
                                '--attribute', 'RUNNABLE',
                                '--attribute', 'BLOCKED',
                                '--dump', outfile])
        self.assertEqual(args.traces, 'traces.yml')
        self.assertEqual(args.output, 'out.pb')
        self.assertEqual(args.period_ns, 20000000)
        self.assertEqual(args.profile_type, 'cpu')  # default
        self.assertEqual(args.attributes, ['RUNNABLE', 'BLOCKED'])
        self.assertEqual(args.debug, False)

        # the dumped configuration can be loaded back
        self.assertTrue(os.path.exists(outfile))
        with open(outfile) as f:
            config = yaml.safe_load(f)
        self.assertEqual(config['period_ns'], 20000000)
        self.assertEqual(config['attributes'], ['RUNNABLE', 'BLOCKED'])

        args = EncoderConfigurator().parse_args([outfile, '-t', 'wall'])
        self.assertEqual(args.period_ns, 20000000)
        self.assertEqual(args.profile_type, 'wall')
        self.assertEqual(args.traces, 'traces.yml')

    def test_errors(self):
        conf = EncoderConfigurator()
        self.assertRaises(MissingValueException, conf, {'traces': 'a.yml'})
        self.assertRaises(UnknownOptionException, conf,
                          {'traces': 'a.yml', 'output': 'b', 'foo': 1})
        self.assertRaises(TypeCastException, conf,
                          {'traces': 'a.yml', 'output': 'b',
                           'period_ns': 'often'})

        # required values missing on the command line
        self.assertRaises(SystemExit, conf.parse_args, ['-i', 'traces.yml'])

    def test_coerce(self):
        conf = EncoderConfigurator()
        config = conf({'traces': 'a.yml', 'output': 'b', 'period_ns': '5'})
        self.assertEqual(config['period_ns'], 5)
        self.assertEqual(config['duration_ns'], 0)

    def test_configuration_files(self):
        """YAML files are merged in order and the command line wins"""
        first = self.path('first.yml')
        second = self.path('second.yml')
        with open(first, 'w') as f:
            f.write("traces: a.yml\noutput: a.pb\nperiod_ns: 5\n")
        with open(second, 'w') as f:
            f.write("output: b.pb\nattributes: [RUNNABLE]\n")

        args = EncoderConfigurator().parse_args([first, second, '--debug',
                                                 '--duration', '7'])
        self.assertEqual(args.traces, 'a.yml')
        self.assertEqual(args.output, 'b.pb')
        self.assertEqual(args.period_ns, 5)
        self.assertEqual(args.duration_ns, 7)
        self.assertEqual(args.attributes, ['RUNNABLE'])
        self.assertEqual(args.debug, True)

        args = EncoderConfigurator().parse_args([first, '-o', 'c.pb'])
        self.assertEqual(args.output, 'c.pb')
        self.assertEqual(args.attributes, [])

    def test_bad_configuration_files(self):
        unknown = self.path('unknown.yml')
        with open(unknown, 'w') as f:
            f.write("traces: a.yml\noutput: a.pb\ncolour: blue\n")
        not_a_mapping = self.path('list.yml')
        with open(not_a_mapping, 'w') as f:
            f.write("- traces\n- output\n")

        for files in ([self.path('missing.yml')], [unknown], [not_a_mapping]):
            self.assertRaises(SystemExit,
                              EncoderConfigurator().parse_args, files)

    def test_defaults_not_shared(self):
        conf = EncoderConfigurator()
        config = conf({'traces': 'a.yml', 'output': 'b'})
        config['attributes'].append('RUNNABLE')
        self.assertEqual(conf({'traces': 'a.yml', 'output': 'b'})['attributes'],
                         [])


class TestRunEncoder(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.traces = os.path.join(self.tempdir, 'traces.yml')
        with open(self.traces, 'w') as f:
            f.write(dump)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_main(self):
        output = os.path.join(self.tempdir, 'profile.pb')
        self.assertEqual(run_encoder.main(['-i', self.traces, '-o', output,
                                           '--period', '1000000',
                                           '--duration', '60000000000',
                                           '--attribute', 'RUNNABLE']), 0)
        with open(output, 'rb') as f:
            profile = Profile.FromString(f.read())

        strings = profile.string_table
        self.assertEqual(profile.duration_nanos, 60000000000)
        self.assertEqual(profile.period, 1000000)
        self.assertEqual([list(s.value) for s in profile.sample],
                         [[3, 3000000], [2, 2000000], [5, 5000000]])
        self.assertEqual(strings[profile.sample[0].label[0].str], 'RUNNABLE')
        self.assertEqual(len(profile.mapping), 1)
        # the native frame is placed in libc
        self.assertEqual(profile.location[1].address, 0x7f0000000100)
        self.assertEqual(profile.location[1].mapping_id, 1)

    def test_encode_trace_dump(self):
        data = run_encoder.encode_trace_dump(yaml.safe_load(dump), 'cpu',
                                             1000000, 0)
        profile = Profile.FromString(data)
        names = set(profile.string_table[f.name] for f in profile.function)
        self.assertEqual(names, set(['Foo.run', 'gc-time']))
        # Foo.run line 10, the native frame, Foo.run line 12, gc-time
        self.assertEqual(len(profile.location), 4)

if __name__ == '__main__':
    unittest.main()
