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

import json as jsonlib
import urllib.parse
from unittest import TestCase

import responses

from mapgrid.config import get_settings

from ..table_client import TableClient


class BaseTestCase(TestCase):
    store_url = get_settings().store_url

    table_id = "tblParcels"

    def setUp(self):
        responses.mock.assert_all_requests_are_fired = True
        self.client = TableClient(token="secret", page_size=2)
        TableClient.set_default_client(self.client)

    def tearDown(self):
        responses.mock.assert_all_requests_are_fired = False
        TableClient.clear_all_default_clients()

    def mock_response(self, method, uri, status=200, **kwargs):
        responses.add(
            method,
            f"{self.store_url}{uri}",
            status=status,
            **kwargs,
        )

    def assert_url_called(self, method, uri, times=1, json=None, params=None):
        """Assert `times` requests went to `uri`, optionally with the given body
        and query parameters."""
        url = f"{self.store_url}{uri}"
        requests = [
            call.request
            for call in responses.calls
            if call.request.url.startswith(url)
        ]
        assert requests, f"No requests were made to uri: {uri}"

        def matches(request):
            if request.method != method:
                return False
            if json is not None and jsonlib.loads(request.body) != json:
                return False
            if params is not None:
                query = urllib.parse.urlsplit(request.url).query
                return dict(urllib.parse.parse_qsl(query)) == params
            return True

        count = sum(1 for request in requests if matches(request))
        assert count == times, (
            f"Expected {times} calls found {count} for {method} {uri}"
            f" (json={json}, params={params})"
        )
