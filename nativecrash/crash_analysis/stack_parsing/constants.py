# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tombstone parsing constants."""

import re

SIGSEGV = 'SIGSEGV'
SIGBUS = 'SIGBUS'
SIGABRT = 'SIGABRT'

# Faults below this address are most likely null pointer dereferences.
MIN_CRASH_ADDRESS = 0x8000

DEFAULT_SIGNALS = (SIGSEGV, SIGBUS)
DEFAULT_ABORT_MESSAGE_EXCLUDES = ('CHECK_', 'CANNOT LINK EXECUTABLE')

# Keys of the serialized crash objects.
PID = 'pid'
TID = 'tid'
NAME = 'name'
PROCESS = 'process'
SIGNAL = 'signal'
FAULT_ADDRESS = 'faultaddress'
ABORT_MESSAGE = 'abortmessage'
BACKTRACE = 'backtrace'
FILENAME = 'filename'
METHOD = 'method'

# Patterns which cannot be compiled directly, or which are used for direct
# comparison.
# e.g. "01-01 12:00:00.123  1234  1234 F DEBUG   :".
LOGCAT_DEBUG_PREFIX = r'[0-9\-\s:.]+[A-Z] DEBUG\s+:\s+'
BACKTRACE_FRAME_PATTERN = (
    LOGCAT_DEBUG_PREFIX +
    # e.g. "#00 pc 000000000004e9b4  "
    r'#[0-9]+ pc [0-9a-fA-F]+  '
    # e.g. "/system/lib64/libc.so (abort+164)"; method is optional.
    r'(?P<filename>[^\s]+)(\s+\((?P<method>.*)\))?')

# Compiled regular expressions.
# Smallest block that starts with the crash header and ends with the
# backtrace footer.
CRASH_BLOB_REGEX = re.compile(
    r'DEBUG\s+?:( [*]{3})+?.*?DEBUG\s+?:\s+?backtrace:', re.DOTALL)
PID_TID_NAME_REGEX = re.compile(
    r'pid: (\d+?), tid: (\d+?), name: ((?:[^\s]+?\s+?)*?)>>> (.*?) <<<')
FAULT_LINE_REGEX = re.compile(
    r'\w+? \d+? \((.*?)\), code -*?\d+? \(.*?\), fault addr '
    r'(?:0x([0-9a-fA-F]+)|-+)')
ABORT_MESSAGE_REGEX = re.compile(r'Abort message: ([^\r\n]*)', re.IGNORECASE)
BACKTRACE_NOTE_REGEX = re.compile(LOGCAT_DEBUG_PREFIX + r'NOTE: .*')

# Frame grammars, most specific first. The BuildId suffix is kept out of the
# method group.
BACKTRACE_FRAME_REGEXES = [
    re.compile(BACKTRACE_FRAME_PATTERN + r'\s+\(BuildId: .*\)'),
    re.compile(BACKTRACE_FRAME_PATTERN),
]

# Marker printed by the test harness before each test case runs.
NEW_TEST_ALERT = 'New test starting with name: '
NEW_TEST_REGEX = re.compile(re.escape(NEW_TEST_ALERT) + r'(\w+?)\(.*?\)')
