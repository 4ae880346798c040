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
"""Load crash filter configurations from yaml files."""

import yaml

from nativecrash.base import errors
from nativecrash.crash_analysis import crash_config

CHECK_MIN_ADDRESS = 'check_min_address'
MIN_CRASH_ADDRESS = 'min_crash_address'
SIGNALS = 'signals'
PROCESS_PATTERNS = 'process_patterns'
ABORT_MESSAGE_INCLUDES = 'abort_message_includes'
ABORT_MESSAGE_EXCLUDES = 'abort_message_excludes'
BACKTRACE_INCLUDES = 'backtrace_includes'
BACKTRACE_EXCLUDES = 'backtrace_excludes'

BACKTRACE_FILENAME = 'filename'
BACKTRACE_METHOD = 'method'


def _load_yaml_file(yaml_file_path):
  """Load yaml file and return parsed contents."""
  try:
    with open(yaml_file_path) as f:
      return yaml.safe_load(f.read())
  except (OSError, yaml.YAMLError):
    raise errors.ConfigParseError(yaml_file_path)


def _as_list(key_name, value):
  if value is None:
    return []
  if isinstance(value, str):
    return [value]
  if not isinstance(value, list):
    raise errors.BadConfigError('%s must be a list' % key_name)
  return value


def _backtrace_patterns(key_name, values):
  """Convert a list of {filename, method} mappings to filter patterns."""
  patterns = []
  for value in _as_list(key_name, values):
    if not isinstance(value, dict):
      raise errors.BadConfigError('%s entries must be mappings' % key_name)

    for entry_key in value:
      if entry_key not in (BACKTRACE_FILENAME, BACKTRACE_METHOD):
        raise errors.InvalidConfigKey('%s.%s' % (key_name, entry_key))

    patterns.append(
        crash_config.BacktraceFilterPattern(
            value.get(BACKTRACE_FILENAME), value.get(BACKTRACE_METHOD)))

  return patterns


# Key name -> function applying the value to a Config.
_SETTERS = {
    CHECK_MIN_ADDRESS:
        lambda config, key, value: config.check_min_address(value),
    MIN_CRASH_ADDRESS:
        lambda config, key, value: config.set_min_address(value),
    SIGNALS:
        lambda config, key, value: config.set_signals(*_as_list(key, value)),
    PROCESS_PATTERNS:
        lambda config, key, value: config.set_process_patterns(
            *_as_list(key, value)),
    ABORT_MESSAGE_INCLUDES:
        lambda config, key, value: config.set_abort_message_includes(
            *_as_list(key, value)),
    ABORT_MESSAGE_EXCLUDES:
        lambda config, key, value: config.set_abort_message_excludes(
            *_as_list(key, value)),
    BACKTRACE_INCLUDES:
        lambda config, key, value: config.set_backtrace_includes(
            *_backtrace_patterns(key, value)),
    BACKTRACE_EXCLUDES:
        lambda config, key, value: config.set_backtrace_excludes(
            *_backtrace_patterns(key, value)),
}


def config_from_dict(values):
  """Build a Config from a mapping. Missing keys keep their defaults."""
  if values is None:
    values = {}

  if not isinstance(values, dict):
    raise errors.BadConfigError('config must be a mapping')

  config = crash_config.Config()
  for key_name, value in values.items():
    setter = _SETTERS.get(key_name)
    if not setter:
      raise errors.InvalidConfigKey(key_name)
    setter(config, key_name, value)

  return config


def load_config(yaml_file_path):
  """Load a Config from a yaml file."""
  return config_from_dict(_load_yaml_file(yaml_file_path))
