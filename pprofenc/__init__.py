# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""pprof encoding of sampled call stacks"""

from .frames import (NATIVE_FRAME_LINE_NUM, AttributeTable, CallFrame,
                     FrameCount, StackFrameElements, StaticResolver, Trace,
                     TraceMultiset)
from .memory_info import COMPILED_CODE, NATIVE, MemoryInfo, MemoryInterval
from .native import NativeMapping, NativeProcessInfo
from .proto import ProfileProtoBuilder, serialize_and_clear_traces
from .utils import PprofEncError, ProfileValidationError, SerializationError
