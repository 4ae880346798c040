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
"""Parsed crash records."""

import re
from typing import NamedTuple
from typing import Optional
from typing import Tuple

from nativecrash.crash_analysis.stack_parsing import constants

HEX_DIGITS_REGEX = re.compile(r'[0-9a-fA-F]+')


def parse_hex(value):
  """Parse a string of bare hex digits. Returns None for anything else,
  including a 0x prefix, separators or surrounding whitespace."""
  if not isinstance(value, str) or not HEX_DIGITS_REGEX.fullmatch(value):
    return None

  return int(value, 16)


def get_fault_address(crash_dict):
  """Return the fault address of a serialized crash, or None if it is missing
  or not valid hex."""
  return parse_hex(crash_dict.get(constants.FAULT_ADDRESS))


def _to_int(value):
  try:
    return int(value)
  except (TypeError, ValueError):
    return 0


class BacktraceFrame(NamedTuple):
  """One frame of a crashing thread's backtrace."""

  filename: Optional[str] = None
  method: Optional[str] = None

  def to_dict(self):
    return {constants.FILENAME: self.filename, constants.METHOD: self.method}

  @classmethod
  def from_dict(cls, frame_dict):
    if not frame_dict:
      return cls()
    return cls(
        filename=frame_dict.get(constants.FILENAME),
        method=frame_dict.get(constants.METHOD))


class CrashRecord(NamedTuple):
  """A single native crash extracted from a log."""

  pid: int = 0
  tid: int = 0
  name: Optional[str] = None
  process: Optional[str] = None
  signal: Optional[str] = None
  fault_address: Optional[int] = None
  abort_message: Optional[str] = None
  backtrace: Tuple[BacktraceFrame, ...] = ()

  @property
  def process_file_name(self):
    """Return the file name of the crashing process, e.g. "mediaserver" for
    "/system/bin/mediaserver"."""
    if self.process is None:
      return ''
    return self.process.rsplit('/', 1)[-1]

  def to_dict(self):
    """Convert to the serialized crash object format. Absent values map to
    None and the fault address is written as bare lowercase hex."""
    fault_address = None
    if self.fault_address is not None:
      fault_address = '%x' % self.fault_address

    return {
        constants.PID: self.pid,
        constants.TID: self.tid,
        constants.NAME: self.name,
        constants.PROCESS: self.process,
        constants.FAULT_ADDRESS: fault_address,
        constants.SIGNAL: self.signal,
        constants.ABORT_MESSAGE: self.abort_message,
        constants.BACKTRACE: [frame.to_dict() for frame in self.backtrace],
    }

  @classmethod
  def from_dict(cls, crash_dict):
    """Build a record from a serialized crash object. Missing keys take their
    defaults and an invalid fault address is treated as absent."""
    backtrace = crash_dict.get(constants.BACKTRACE) or []
    return cls(
        pid=_to_int(crash_dict.get(constants.PID)),
        tid=_to_int(crash_dict.get(constants.TID)),
        name=crash_dict.get(constants.NAME),
        process=crash_dict.get(constants.PROCESS),
        signal=crash_dict.get(constants.SIGNAL),
        fault_address=get_fault_address(crash_dict),
        abort_message=crash_dict.get(constants.ABORT_MESSAGE),
        backtrace=tuple(BacktraceFrame.from_dict(frame) for frame in backtrace))
