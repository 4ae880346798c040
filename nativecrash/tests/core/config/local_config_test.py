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
"""Tests for local_config."""

import os
import unittest

from nativecrash.base import errors
from nativecrash.config import local_config
from nativecrash.crash_analysis import crash_config

DATA_DIRECTORY = os.path.join(os.path.dirname(__file__), 'local_config_data')


def _patterns(patterns):
  return [pattern.pattern for pattern in patterns]


class LoadConfigTest(unittest.TestCase):
  """Tests for load_config."""

  def test_load(self):
    """Test loading every setting from a yaml file."""
    config = local_config.load_config(
        os.path.join(DATA_DIRECTORY, 'stagefright.yaml'))
    self.assertTrue(config.check_min_address_enabled)
    self.assertEqual(0x10000, config.min_crash_address)
    self.assertEqual(frozenset(['SIGSEGV', 'SIGBUS', 'SIGABRT']),
                     config.signals)
    self.assertEqual(['mediaserver', r'media\.extractor'],
                     _patterns(config.process_patterns))
    self.assertEqual((), config.abort_message_includes)
    self.assertEqual(
        ['CHECK_', 'CANNOT LINK EXECUTABLE', 'FORTIFY: read: prevented'],
        _patterns(config.abort_message_excludes))
    self.assertEqual([
        crash_config.BacktraceFilterPattern('libstagefright', None),
        crash_config.BacktraceFilterPattern(r'libc\.so', '^(free|malloc)'),
    ], list(config.backtrace_includes))
    self.assertEqual([crash_config.BacktraceFilterPattern(None, 'TestHelper')],
                     list(config.backtrace_excludes))

  def test_missing_file(self):
    with self.assertRaises(errors.ConfigParseError):
      local_config.load_config(os.path.join(DATA_DIRECTORY, 'missing.yaml'))

  def test_broken_file(self):
    with self.assertRaises(errors.ConfigParseError):
      local_config.load_config(os.path.join(DATA_DIRECTORY, 'broken.yaml'))


class ConfigFromDictTest(unittest.TestCase):
  """Tests for config_from_dict."""

  def test_empty(self):
    """Test that missing keys keep their defaults."""
    for values in [None, {}]:
      config = local_config.config_from_dict(values)
      self.assertEqual(0x8000, config.min_crash_address)
      self.assertEqual(frozenset(['SIGSEGV', 'SIGBUS']), config.signals)
      self.assertEqual(['CHECK_', 'CANNOT LINK EXECUTABLE'],
                       _patterns(config.abort_message_excludes))

  def test_hex_string_address(self):
    config = local_config.config_from_dict({'min_crash_address': '1000'})
    self.assertEqual(0x1000, config.min_crash_address)

  def test_single_string(self):
    """Test that a single string is accepted where a list is expected."""
    config = local_config.config_from_dict({'process_patterns': 'mediaserver'})
    self.assertEqual(['mediaserver'], _patterns(config.process_patterns))

  def test_null_list_clears(self):
    config = local_config.config_from_dict({'abort_message_excludes': None})
    self.assertEqual((), config.abort_message_excludes)

  def test_unknown_key(self):
    with self.assertRaises(errors.InvalidConfigKey) as context:
      local_config.config_from_dict({'signal': ['SIGSEGV']})
    self.assertEqual('signal', context.exception.key_name)

  def test_unknown_backtrace_key(self):
    with self.assertRaises(errors.InvalidConfigKey):
      local_config.config_from_dict(
          {'backtrace_excludes': [{
              'file': 'libc.so'
          }]})

  def test_bad_values(self):
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict(['mediaserver'])
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict({'signals': {'SIGSEGV': True}})
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict({'backtrace_includes': ['libc.so']})
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict({'min_crash_address': 'zzz'})

  def test_bad_signals(self):
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict({'signals': [['SIGSEGV']]})

  def test_check_min_address_string(self):
    """Test that a quoted boolean is rejected instead of read as true."""
    with self.assertRaises(errors.BadConfigError):
      local_config.config_from_dict({'check_min_address': 'false'})

    config = local_config.config_from_dict({'check_min_address': False})
    self.assertFalse(config.check_min_address_enabled)

  def test_invalid_pattern(self):
    with self.assertRaises(errors.InvalidPatternError):
      local_config.config_from_dict({'process_patterns': ['(']})
