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
"""Tombstone parsing module.

Finds native crash reports printed by debuggerd into a log and turns each of
them into a CrashRecord. Crash reports look like:

  F DEBUG   : *** *** *** *** *** *** *** *** *** *** *** *** *** *** *** ***
  F DEBUG   : pid: 1234, tid: 1250, name: Binder:1234_2  >>> /system/bin/foo <<<
  F DEBUG   : signal 11 (SIGSEGV), code 1 (SEGV_MAPERR), fault addr 0xdead
  F DEBUG   : backtrace:
  F DEBUG   :       #00 pc 0000000000012345  /system/lib64/libfoo.so (Bar+8)
"""

import collections

from nativecrash.crash_analysis import crash_record
from nativecrash.crash_analysis.stack_parsing import constants
from nativecrash.metrics import logs


class CrashState(object):
  """Fields collected while parsing a single crash blob."""

  def __init__(self):
    self.pid = 0
    self.tid = 0
    self.name = None
    self.process = None
    self.signal = None
    self.fault_address = None
    self.abort_message = None
    self.frames = []

  def to_record(self):
    return crash_record.CrashRecord(
        pid=self.pid,
        tid=self.tid,
        name=self.name,
        process=self.process,
        signal=self.signal,
        fault_address=self.fault_address,
        abort_message=self.abort_message,
        backtrace=tuple(self.frames))


def _parse_int(value, field_name):
  """Parse a decimal integer, falling back to 0."""
  try:
    return int(value)
  except (TypeError, ValueError):
    logs.warning('Failed to parse %s from tombstone.' % field_name, value=value)
    return 0


class TombstoneParser(object):
  """Tombstone parser."""

  def __init__(self, frame_regexes=None):
    if frame_regexes is None:
      frame_regexes = constants.BACKTRACE_FRAME_REGEXES

    self.frame_regexes = list(frame_regexes)

  def update_state_on_pid_line(self, blob, state):
    """Update pid, tid, name and process from the first pid line."""
    match = constants.PID_TID_NAME_REGEX.search(blob)
    if not match:
      return None

    state.pid = _parse_int(match.group(1), 'pid')
    state.tid = _parse_int(match.group(2), 'tid')
    state.name = match.group(3).strip() or None
    state.process = match.group(4).strip()
    return match

  def update_state_on_fault_line(self, blob, state):
    """Update signal and fault address from the first fault line. A fault
    address of "-" leaves the address unset."""
    match = constants.FAULT_LINE_REGEX.search(blob)
    if not match:
      return None

    state.signal = match.group(1)
    fault_address = match.group(2)
    if fault_address is not None:
      state.fault_address = crash_record.parse_hex(fault_address)
    return match

  def update_state_on_abort_message(self, blob, state):
    """Update the abort message from the first abort line."""
    match = constants.ABORT_MESSAGE_REGEX.search(blob)
    if not match:
      return None

    state.abort_message = match.group(1)
    return match

  def match_frame(self, line):
    """Return the match of the first frame grammar accepting |line|."""
    for regex in self.frame_regexes:
      match = regex.fullmatch(line)
      if match:
        return match

    return None

  def add_frames(self, text, footer_end, state):
    """Add the backtrace frames that directly follow the backtrace footer
    ending at |footer_end| in |text|.

    Collection stops at the first line that is neither a NOTE line nor a
    frame, so unrelated lines interleaved right after the footer truncate the
    backtrace. Only newline-terminated lines are frame candidates."""
    # Skip the rest of the footer line.
    line_end = text.find('\n', footer_end)
    while line_end != -1:
      line_start = line_end + 1
      line_end = text.find('\n', line_start)
      if line_end == -1:
        break

      line = text[line_start:line_end]
      if constants.BACKTRACE_NOTE_REGEX.fullmatch(line):
        continue

      match = self.match_frame(line)
      if not match:
        break

      state.frames.append(
          crash_record.BacktraceFrame(
              filename=match.group('filename'), method=match.group('method')))

  def parse_blob(self, blob, text='', footer_end=0):
    """Parse one crash blob into a CrashRecord. Frames are read from |text|
    starting at |footer_end|, the end of the blob's backtrace footer."""
    state = CrashState()
    self.update_state_on_pid_line(blob, state)
    self.update_state_on_fault_line(blob, state)
    self.update_state_on_abort_message(blob, state)
    self.add_frames(text, footer_end, state)
    return state.to_record()

  def parse(self, text):
    """Yield a CrashRecord for every crash blob in |text|, in order."""
    for blob_match in constants.CRASH_BLOB_REGEX.finditer(text):
      yield self.parse_blob(blob_match.group(0), text, blob_match.end())


def add_all_crashes(text, crashes):
  """Append all crashes found in |text| to |crashes| and return it."""
  if not text:
    return crashes

  found = list(TombstoneParser().parse(text))
  crashes.extend(found)
  if found:
    logs.info(
        'Found %d native crash(es) in log.' % len(found),
        processes=[crash.process for crash in found])
  return crashes


def extract_crashes(text):
  """Return the list of crashes found in |text|, in source order."""
  return add_all_crashes(text, [])


def extract_crashes_by_test(text):
  """Group the crashes in |text| by the test that was running, as announced
  by the "New test starting with name:" marker. Crashes logged before any
  marker are grouped under None."""
  crashes_by_test = collections.OrderedDict()
  if not text:
    return crashes_by_test

  test_name = None
  segment_start = 0
  for match in constants.NEW_TEST_REGEX.finditer(text):
    _add_segment(crashes_by_test, test_name, text[segment_start:match.start()])
    test_name = match.group(1)
    segment_start = match.end()

  _add_segment(crashes_by_test, test_name, text[segment_start:])
  return crashes_by_test


def _add_segment(crashes_by_test, test_name, segment):
  crashes = add_all_crashes(segment, [])
  if crashes or test_name is not None:
    crashes_by_test.setdefault(test_name, []).extend(crashes)
