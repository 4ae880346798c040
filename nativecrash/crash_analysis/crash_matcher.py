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
"""Functions for deciding which crashes are security relevant.

A crash is kept only if it passes every filter stage, evaluated in order:
process, signal, abort message, minimum fault address, backtrace includes and
backtrace excludes.
"""

from nativecrash.crash_analysis import crash_record
from nativecrash.metrics import logs


def _matches_any(patterns, value):
  """Return True if any pattern matches the whole of |value|."""
  return any(pattern.fullmatch(value) for pattern in patterns)


def _searches_any(patterns, value):
  """Return True if any pattern is found anywhere in |value|."""
  return any(pattern.search(value) for pattern in patterns)


def _any_frame_matches(backtrace_patterns, backtrace):
  return any(
      pattern.match(frame)
      for frame in backtrace
      for pattern in backtrace_patterns)


def process_filter(config):
  """Crash process file name must fully match a process pattern."""

  def predicate(crash):
    if crash.process is None:
      return False
    return _matches_any(config.process_patterns, crash.process_file_name)

  return predicate


def signal_filter(config):
  """Crash signal must be one of the configured signals."""

  def predicate(crash):
    return crash.signal is not None and crash.signal in config.signals

  return predicate


def abort_message_filter(config):
  """Abort message must match an include (if any) and no exclude. Crashes
  without an abort message pass."""

  def predicate(crash):
    abort_message = crash.abort_message
    if abort_message is None:
      return True

    if (config.abort_message_includes and
        not _searches_any(config.abort_message_includes, abort_message)):
      return False

    return not _searches_any(config.abort_message_excludes, abort_message)

  return predicate


def min_address_filter(config):
  """Known fault addresses must not be below the minimum crash address."""

  def predicate(crash):
    if not config.check_min_address or crash.fault_address is None:
      return True

    return crash.fault_address >= config.min_crash_address

  return predicate


def backtrace_include_filter(config):
  """Some frame must match an include pattern, if there are any."""

  def predicate(crash):
    if not config.backtrace_includes:
      return True

    return _any_frame_matches(config.backtrace_includes, crash.backtrace)

  return predicate


def backtrace_exclude_filter(config):
  """No frame may match an exclude pattern."""

  def predicate(crash):
    return not _any_frame_matches(config.backtrace_excludes, crash.backtrace)

  return predicate


FILTER_STAGES = [
    process_filter,
    signal_filter,
    abort_message_filter,
    min_address_filter,
    backtrace_include_filter,
    backtrace_exclude_filter,
]


def build_filters(config):
  """Return the filter predicates for |config|, in evaluation order."""
  snapshot = config.snapshot()
  return [stage(snapshot) for stage in FILTER_STAGES]


def _to_record(crash):
  if isinstance(crash, crash_record.CrashRecord):
    return crash
  return crash_record.CrashRecord.from_dict(crash)


def is_security_crash(crash, filters):
  """Return True if |crash| passes every filter."""
  return all(predicate(crash) for predicate in filters)


def filter_security_crashes(crashes, config):
  """Return the crashes serious enough to fail a test, in input order.

  |crashes| may hold CrashRecords or their serialized dicts. A crash that
  can't be evaluated is dropped without affecting the others."""
  filters = build_filters(config)
  security_crashes = []
  for crash in crashes:
    try:
      if is_security_crash(_to_record(crash), filters):
        security_crashes.append(crash)
    except Exception:
      logs.warning('Failed to evaluate crash, skipping it.', crash=repr(crash))

  return security_crashes


def has_security_crash(crashes, config):
  """Return True if any crash is serious enough to fail a test."""
  return bool(filter_security_crashes(crashes, config))
