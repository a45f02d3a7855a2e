# Copyright 2024 The Mapgrid Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys

if sys.version_info < (3, 9):
    msg = "Python version {}.{} not supported by mapgrid".format(
        sys.version_info.major, sys.version_info.minor
    )
    raise ImportError(msg)


def clear_client_state():
    """Clear all cached client state."""
    from ..common.http.service import DefaultClientMixin

    DefaultClientMixin.clear_all_default_clients()


__all__ = ["clear_client_state"]
