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
"""Logging functions."""

import datetime
import json
import logging
from logging import config
import os
import sys
import traceback
from typing import Any

# Large log text (e.g. a whole tombstone) is truncated in the middle.
LOG_MESSAGE_LIMIT = 100000
_logger = None
_default_extras = {}


def _console_logging_enabled():
  """Return bool on where console logging is enabled, usually for tests."""
  return bool(os.getenv('LOG_TO_CONSOLE'))


def _cloud_logging_enabled():
  """Return bool True where Google Cloud Logging is enabled. This is opt-in
  and always disabled when running unit tests."""
  return bool(os.getenv('LOG_TO_GCP')) and not os.getenv('PY_UNITTESTS')


def set_logger(logger):
  """Set the logger."""
  global _logger
  _logger = logger


def get_logging_config_dict(name):
  """Get config dict for the logger `name`."""
  return {
      'version': 1,
      'disable_existing_loggers': False,
      'formatters': {
          'json': {
              '()': JsonFormatter,
          },
      },
      'handlers': {
          'console': {
              'class': 'logging.StreamHandler',
              'level': logging.INFO,
              'formatter': 'json',
              'stream': 'ext://sys.stderr',
          },
      },
      'loggers': {
          name: {
              'handlers': ['console'],
              'propagate': False,
          }
      },
  }


def truncate(msg, limit):
  """We need to truncate the message in the middle if it gets too long."""
  if not isinstance(msg, str) or len(msg) <= limit:
    return msg

  half = limit // 2
  return '\n'.join([
      msg[:half],
      '...%d characters truncated...' % (len(msg) - limit), msg[-half:]
  ])


class JsonFormatter(logging.Formatter):
  """Formats log records as JSON."""

  def format(self, record: logging.LogRecord) -> str:
    """Format LogEntry into JSON string."""
    entry = {
        'message':
            truncate(record.getMessage(), LOG_MESSAGE_LIMIT),
        'created':
            datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc).isoformat(),
        'severity':
            record.levelname,
        'name':
            record.name,
        'pid':
            os.getpid(),
    }

    entry['location'] = getattr(record, 'location', {'error': True})
    entry['extras'] = {
        k: truncate(v, LOG_MESSAGE_LIMIT)
        for k, v in getattr(record, 'extras', {}).items()
    }
    if record.exc_info and record.exc_info[0]:
      formatted_exception = ''.join(
          traceback.format_exception(*record.exc_info))
      entry['message'] += '\n' + truncate(formatted_exception,
                                          LOG_MESSAGE_LIMIT)

    if not entry['extras']:
      del entry['extras']

    return json.dumps(entry, default=_handle_unserializable)


def _handle_unserializable(unserializable: Any) -> str:
  try:
    return str(unserializable, 'utf-8')
  except TypeError:
    return str(unserializable)


def configure_cloud_logging():
  """Configure Google Cloud Logging."""
  import google.cloud.logging
  from google.cloud.logging.handlers import CloudLoggingHandler

  client = google.cloud.logging.Client(
      project=os.getenv('LOGGING_CLOUD_PROJECT_ID'))
  handler = CloudLoggingHandler(client=client, name='nativecrash')
  handler.setLevel(logging.INFO)
  handler.setFormatter(JsonFormatter())
  logging.getLogger().addHandler(handler)


def configure(name, extras=None):
  """Set logger. |extras| will be included by emit() in log messages."""
  if _console_logging_enabled():
    config.dictConfig(get_logging_config_dict(name))
  if _cloud_logging_enabled():
    configure_cloud_logging()
  logger = logging.getLogger(name)
  logger.setLevel(logging.INFO)
  set_logger(logger)

  # Set _default_extras so they can be used later.
  if extras is None:
    extras = {}
  global _default_extras
  _default_extras = extras


def get_logger():
  """Return logger. We need this method because we need to mock logger."""
  if _logger:
    return _logger

  if _console_logging_enabled():
    # Force a logger when console logging is enabled.
    configure('nativecrash')

  return _logger


def get_source_location():
  """Return the caller file, lineno, and funcName."""
  frame = sys._getframe(1)  # pylint: disable=protected-access
  while frame and hasattr(frame, 'f_code'):
    if not frame.f_code.co_filename.endswith('logs.py'):
      return frame.f_code.co_filename, frame.f_lineno, frame.f_code.co_name
    frame = frame.f_back

  return 'Unknown', '-1', 'Unknown'


def emit(level, message, exc_info=None, **extras):
  """Log in JSON."""
  logger = get_logger()
  if not logger:
    return

  # Include extras passed as an argument and default extras.
  all_extras = _default_extras.copy()
  all_extras.update(extras)

  path_name, line_number, method_name = get_source_location()

  # Extra fields are wrapped under 'extras' so they don't clash with
  # LogRecord attributes.
  logger.log(
      level,
      truncate(message, LOG_MESSAGE_LIMIT),
      exc_info=exc_info,
      extra={
          'extras': all_extras,
          'location': {
              'path': path_name,
              'line': line_number,
              'method': method_name
          }
      })


def info(message, **extras):
  """Logs the message to a given log file."""
  emit(logging.INFO, message, **extras)


def warning(message, **extras):
  """Logs the warning message."""
  emit(logging.WARN, message, exc_info=sys.exc_info(), **extras)
