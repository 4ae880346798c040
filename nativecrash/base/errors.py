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
"""Functions for errors management."""


class Error(Exception):
  """Base exception class for errors."""


class BadConfigError(Error):
  """Error thrown when a crash filter configuration is invalid."""

  def __init__(self, message):
    super(BadConfigError, self).__init__('Bad configuration: %s.' % message)


class InvalidConfigKey(Error):
  """Error thrown when an unknown configuration key is used."""

  def __init__(self, key_name):
    super(InvalidConfigKey, self).__init__('Invalid config key: %s.' % key_name)
    self.key_name = key_name


class ConfigParseError(Error):
  """Error thrown when a configuration file can't be parsed."""

  def __init__(self, file_path):
    super(ConfigParseError,
          self).__init__('Failed to parse config file: %s.' % file_path)
    self.file_path = file_path


class InvalidPatternError(Error):
  """Error thrown when a filter pattern is not a valid regular expression."""

  def __init__(self, pattern, reason=None):
    message = 'Invalid pattern %r' % pattern
    if reason:
      message += ': %s' % reason
    super(InvalidPatternError, self).__init__(message + '.')
    self.pattern = pattern
