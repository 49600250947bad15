#!/usr/bin/env python

"""
test the display name helpers
"""

import unittest

from pprofenc.display import fix_method_parameters, simplify_function_name
from pprofenc.display import unresolved_method_name


class TestDisplay(unittest.TestCase):

    def test_fix_method_parameters(self):
        self.assertEqual(fix_method_parameters('()V'), '()')
        self.assertEqual(fix_method_parameters('(I)V'), '(int)')
        self.assertEqual(
            fix_method_parameters('(ILjava/lang/String;[J)Ljava/util/List;'),
            '(int, java.lang.String, long[])')
        self.assertEqual(fix_method_parameters('([[Ljava/lang/Object;Z)V'),
                         '(java.lang.Object[][], boolean)')

    def test_fix_method_parameters_passthrough(self):
        """anything that is not a descriptor is left alone"""
        self.assertEqual(fix_method_parameters(''), '')
        self.assertEqual(fix_method_parameters('(int, long)'), '(int, long)')
        self.assertEqual(fix_method_parameters('(Ljava/lang/String'),
                         '(Ljava/lang/String')
        self.assertEqual(fix_method_parameters('(Q)V'), '(Q)V')

    def test_simplify_function_name(self):
        self.assertEqual(simplify_function_name('com.example.Foo.run(int)'),
                         'Foo.run')
        self.assertEqual(
            simplify_function_name('com.example.Foo$Bar.run(java.lang.String)'),
            'Foo$Bar.run')
        self.assertEqual(simplify_function_name('Foo.run()'), 'Foo.run')
        self.assertEqual(simplify_function_name('gc-time'), 'gc-time')
        self.assertEqual(simplify_function_name(''), '')

    def test_unresolved_method_name(self):
        self.assertEqual(unresolved_method_name(0x9999), '[unresolved 0x9999]')
        self.assertEqual(unresolved_method_name('jmethod-42'),
                         '[unresolved jmethod-42]')
        # no package to strip
        self.assertEqual(
            simplify_function_name(unresolved_method_name(0x9999)),
            '[unresolved 0x9999]')

if __name__ == '__main__':
    unittest.main()
