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
"""Configuration of the security crash filters."""

import re
from typing import FrozenSet
from typing import NamedTuple
from typing import Tuple

from nativecrash.base import errors
from nativecrash.crash_analysis.stack_parsing import constants


def compile_pattern(pattern):
  """Compile |pattern| unless it already is a compiled regex."""
  if isinstance(pattern, re.Pattern):
    return pattern

  if not isinstance(pattern, str):
    raise errors.InvalidPatternError(pattern, 'expected a string or regex')

  try:
    return re.compile(pattern)
  except re.error as e:
    raise errors.InvalidPatternError(pattern, str(e))


def compile_patterns(patterns):
  return [compile_pattern(pattern) for pattern in patterns]


class BacktraceFilterPattern(object):
  """Filename and method patterns to filter backtrace frames on.

  A None pattern is a wildcard and matches anything, including a missing
  field. A missing filename or method never matches a non-None pattern.
  Patterns are searched for anywhere in the field.
  """

  def __init__(self, filename_pattern=None, method_pattern=None):
    self.filename_pattern = (None if filename_pattern is None else
                             compile_pattern(filename_pattern))
    self.method_pattern = (None if method_pattern is None else
                           compile_pattern(method_pattern))

  @staticmethod
  def _field_matches(pattern, value):
    if pattern is None:
      return True
    return value is not None and pattern.search(value) is not None

  def match(self, frame):
    """Return True if |frame| matches both patterns."""
    if frame is None:
      return False

    return (self._field_matches(self.filename_pattern, frame.filename) and
            self._field_matches(self.method_pattern, frame.method))

  def __eq__(self, other):
    if not isinstance(other, BacktraceFilterPattern):
      return NotImplemented
    return (self.filename_pattern == other.filename_pattern and
            self.method_pattern == other.method_pattern)

  def __hash__(self):
    return hash((self.filename_pattern, self.method_pattern))

  def __repr__(self):
    return 'BacktraceFilterPattern(%r, %r)' % (
        getattr(self.filename_pattern, 'pattern', None),
        getattr(self.method_pattern, 'pattern', None))


def _check_backtrace_patterns(patterns):
  for pattern in patterns:
    if not isinstance(pattern, BacktraceFilterPattern):
      raise errors.BadConfigError(
          'expected BacktraceFilterPattern, got %r' % (pattern,))
  return list(patterns)


def _check_signals(signals):
  for signal in signals:
    if not isinstance(signal, str):
      raise errors.BadConfigError('invalid signal %r' % (signal,))
  return list(signals)


def _parse_address(address):
  """Parse an address given as an int or a hex string."""
  if isinstance(address, bool):
    raise errors.BadConfigError('invalid address %r' % address)

  if isinstance(address, str):
    try:
      address = int(address, 16)
    except ValueError:
      raise errors.BadConfigError('invalid address %r' % address)

  if not isinstance(address, int) or address < 0:
    raise errors.BadConfigError('invalid address %r' % (address,))

  return address


class ConfigSnapshot(NamedTuple):
  """Read-only view of a Config, taken when matching starts."""

  check_min_address: bool
  min_crash_address: int
  signals: FrozenSet[str]
  process_patterns: Tuple[re.Pattern, ...]
  abort_message_includes: Tuple[re.Pattern, ...]
  abort_message_excludes: Tuple[re.Pattern, ...]
  backtrace_includes: Tuple[BacktraceFilterPattern, ...]
  backtrace_excludes: Tuple[BacktraceFilterPattern, ...]


class Config(object):
  """Security crash filter configuration. All setters return the config so
  calls can be chained, e.g.

    Config().set_process_patterns('mediaserver').append_signals('SIGABRT')
  """

  def __init__(self):
    self._check_min_address = True
    self._min_crash_address = constants.MIN_CRASH_ADDRESS
    self._signals = list(constants.DEFAULT_SIGNALS)
    self._process_patterns = []
    self._abort_message_includes = []
    self._abort_message_excludes = compile_patterns(
        constants.DEFAULT_ABORT_MESSAGE_EXCLUDES)
    self._backtrace_includes = []
    self._backtrace_excludes = []

  def set_min_address(self, min_crash_address):
    """Sets the min address."""
    self._min_crash_address = _parse_address(min_crash_address)
    return self

  def check_min_address(self, check_min_address):
    """Enables or disables the min address check."""
    if not isinstance(check_min_address, bool):
      raise errors.BadConfigError(
          'check_min_address must be true or false, got %r' %
          (check_min_address,))
    self._check_min_address = check_min_address
    return self

  def set_signals(self, *signals):
    """Sets the signals."""
    self._signals = _check_signals(signals)
    return self

  def append_signals(self, *signals):
    """Appends signals."""
    self._signals.extend(_check_signals(signals))
    return self

  def set_process_patterns(self, *patterns):
    """Sets the process patterns."""
    self._process_patterns = compile_patterns(patterns)
    return self

  def append_process_patterns(self, *patterns):
    """Appends the process patterns."""
    self._process_patterns.extend(compile_patterns(patterns))
    return self

  def set_abort_message_includes(self, *patterns):
    """Sets the abort message includes."""
    self._abort_message_includes = compile_patterns(patterns)
    return self

  def append_abort_message_includes(self, *patterns):
    """Appends the abort message includes."""
    self._abort_message_includes.extend(compile_patterns(patterns))
    return self

  def set_abort_message_excludes(self, *patterns):
    """Sets the abort message excludes."""
    self._abort_message_excludes = compile_patterns(patterns)
    return self

  def append_abort_message_excludes(self, *patterns):
    """Appends the abort message excludes."""
    self._abort_message_excludes.extend(compile_patterns(patterns))
    return self

  def set_backtrace_includes(self, *patterns):
    """Sets which backtraces should be included."""
    self._backtrace_includes = _check_backtrace_patterns(patterns)
    return self

  def append_backtrace_includes(self, *patterns):
    """Appends which backtraces should be included."""
    self._backtrace_includes.extend(_check_backtrace_patterns(patterns))
    return self

  def set_backtrace_excludes(self, *patterns):
    """Sets which backtraces should be excluded."""
    self._backtrace_excludes = _check_backtrace_patterns(patterns)
    return self

  def append_backtrace_excludes(self, *patterns):
    """Appends which backtraces should be excluded."""
    self._backtrace_excludes.extend(_check_backtrace_patterns(patterns))
    return self

  @property
  def check_min_address_enabled(self):
    return self._check_min_address

  @property
  def min_crash_address(self):
    return self._min_crash_address

  @property
  def signals(self):
    return frozenset(self._signals)

  @property
  def process_patterns(self):
    return tuple(self._process_patterns)

  @property
  def abort_message_includes(self):
    return tuple(self._abort_message_includes)

  @property
  def abort_message_excludes(self):
    return tuple(self._abort_message_excludes)

  @property
  def backtrace_includes(self):
    return tuple(self._backtrace_includes)

  @property
  def backtrace_excludes(self):
    return tuple(self._backtrace_excludes)

  def snapshot(self):
    """Return an immutable copy of the current settings."""
    return ConfigSnapshot(
        check_min_address=self.check_min_address_enabled,
        min_crash_address=self.min_crash_address,
        signals=self.signals,
        process_patterns=self.process_patterns,
        abort_message_includes=self.abort_message_includes,
        abort_message_excludes=self.abort_message_excludes,
        backtrace_includes=self.backtrace_includes,
        backtrace_excludes=self.backtrace_excludes)
