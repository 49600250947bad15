# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Utility functions for pprofenc"""

import time
from mozlog import unstructured as mozlog

log = mozlog.getLogger('pprofenc')


class Timer(object):
    def __init__(self):
        self._start_time = 0
        self.start()

    def start(self):
        self._start_time = time.time()

    def elapsed(self):
        seconds = time.time() - self._start_time
        return time.strftime("%H:%M:%S", time.gmtime(seconds))


def startLogger(levelChoice):
    # set the level of the package logger
    log_levels = {'debug': mozlog.DEBUG, 'info': mozlog.INFO}
    log.setLevel(log_levels[levelChoice])


class PprofEncError(Exception):
    "Errors found while encoding a profile."


class ProfileValidationError(PprofEncError):
    """The accumulated profile is not structurally valid and cannot be
    emitted"""


class SerializationError(PprofEncError):
    """The profile could not be serialized to its wire format"""
