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
"""JSON helper utilities."""

import json

from nativecrash.crash_analysis import crash_record
from nativecrash.crash_analysis.stack_parsing import constants


class JSONEncoder(json.JSONEncoder):
  """Custom version of JSON encoder with support for crash records."""

  def encode(self, o):
    # NamedTuples are tuples, which the base encoder writes as arrays without
    # consulting default().
    return super(JSONEncoder, self).encode(_convert(o))

  def iterencode(self, o, _one_shot=False):
    return super(JSONEncoder, self).iterencode(_convert(o), _one_shot)


def _convert(o):
  """Replace crash records nested in lists, tuples and dicts by dicts."""
  if isinstance(o, (crash_record.CrashRecord, crash_record.BacktraceFrame)):
    return o.to_dict()
  if isinstance(o, (list, tuple)):
    return [_convert(item) for item in o]
  if isinstance(o, dict):
    return {key: _convert(value) for key, value in o.items()}
  return o


class JSONDecoder(json.JSONDecoder):
  """Custom version of JSON decoder that turns serialized crash objects back
  into crash records."""

  def __init__(self, *args, **kwargs):
    super(JSONDecoder, self).__init__(
        object_hook=self.dict_to_object, *args, **kwargs)

  def dict_to_object(self, d):
    # Frames are decoded as part of their crash.
    if constants.BACKTRACE not in d:
      return d

    return crash_record.CrashRecord.from_dict(d)


def dumps(obj, *args, **kwargs):
  """Custom json.dumps using custom encoder JSONEncoder defined in this file."""
  kwargs['cls'] = JSONEncoder
  kwargs['sort_keys'] = True
  return json.dumps(obj, *args, **kwargs)


def loads(obj, *args, **kwargs):
  """Custom json.loads using custom encoder JSONDecoder defined in this file."""
  kwargs['cls'] = JSONDecoder
  return json.loads(obj, *args, **kwargs)
