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
"""Native crash extraction and security crash filtering."""

from nativecrash.crash_analysis.crash_config import BacktraceFilterPattern
from nativecrash.crash_analysis.crash_config import Config
from nativecrash.crash_analysis.crash_matcher import filter_security_crashes
from nativecrash.crash_analysis.crash_matcher import has_security_crash
from nativecrash.crash_analysis.crash_record import BacktraceFrame
from nativecrash.crash_analysis.crash_record import CrashRecord
from nativecrash.crash_analysis.stack_parsing.tombstone_parser import \
    add_all_crashes
from nativecrash.crash_analysis.stack_parsing.tombstone_parser import \
    extract_crashes
from nativecrash.crash_analysis.stack_parsing.tombstone_parser import \
    extract_crashes_by_test
