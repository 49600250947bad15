#!/usr/bin/env python

# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import importlib.util
import os
import sys
import unittest

here = os.path.dirname(os.path.abspath(__file__))
tests_dir = os.path.join(here, 'tests')
testfiles = [os.path.join(tests_dir, i) for i in sorted(os.listdir(tests_dir))
             if i.startswith('test_') and i.endswith('.py')]

def unittests(path):
    """return the unittests in a .py file"""
    path = os.path.abspath(path)
    assert os.path.exists(path)
    directory = os.path.dirname(path)
    sys.path.insert(0, directory) # insert directory into path for top-level imports
    modname = os.path.splitext(os.path.basename(path))[0]
    print(modname)
    spec = importlib.util.spec_from_file_location(modname, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    sys.path.pop(0) # remove directory from global path
    loader = unittest.TestLoader()
    return list(loader.loadTestsFromModule(module))

def runtests():
    sys.path.insert(0, here)
    suite = unittest.TestSuite()
    for testfile in testfiles:
        for test in unittests(testfile):
            suite.addTest(test)
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    sys.exit(not result.wasSuccessful())

if __name__ == '__main__':
    runtests()
