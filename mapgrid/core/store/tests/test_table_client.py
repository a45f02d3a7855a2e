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

import json

import responses

from mapgrid.exceptions import BadRequestError, NotFoundError

from ...common.property_filtering import Properties
from ..models import FieldSchema, FieldType, Record
from ..table_client import TableClient
from .base import BaseTestCase


def record(id, **fields):
    return {"id": id, "fields": fields, "createdTime": "2024-05-01T10:00:00.000Z"}


class TestTableClient(BaseTestCase):
    @responses.activate
    def test_list_records_with_limit(self):
        self.mock_response(
            responses.GET,
            f"/table/{self.table_id}/record",
            json={"records": [record("rec1", name="a")]},
        )

        records = self.client.list_records(self.table_id, limit=10, offset=5)

        assert records == [Record("rec1", {"name": "a"})]
        assert records[0].created_time == "2024-05-01T10:00:00.000Z"
        self.assert_url_called(
            "GET",
            f"/table/{self.table_id}/record",
            params={"limit": "10", "offset": "5"},
        )

    @responses.activate
    def test_list_records_pages(self):
        self.mock_response(
            responses.GET,
            f"/table/{self.table_id}/record",
            json={"records": [record("rec1"), record("rec2")]},
        )
        self.mock_response(
            responses.GET,
            f"/table/{self.table_id}/record",
            json={"records": [record("rec3")]},
        )

        records = self.client.list_records(self.table_id)

        assert [r.id for r in records] == ["rec1", "rec2", "rec3"]
        self.assert_url_called(
            "GET", f"/table/{self.table_id}/record", params={"limit": "2"}
        )
        self.assert_url_called(
            "GET",
            f"/table/{self.table_id}/record",
            params={"limit": "2", "offset": "2"},
        )

    @responses.activate
    def test_list_records_filter_and_sort(self):
        self.mock_response(
            responses.GET, f"/table/{self.table_id}/record", json={"records": []}
        )
        p = Properties()

        self.client.list_records(
            self.table_id, limit=5, filter=p.status == "active", sort="-area"
        )

        self.assert_url_called(
            "GET",
            f"/table/{self.table_id}/record",
            params={
                "limit": "5",
                "filter": json.dumps({"equals": {"status": "active"}}),
                "sort": "-area",
            },
        )

    @responses.activate
    def test_list_records_plain_list(self):
        self.mock_response(
            responses.GET, f"/table/{self.table_id}/record", json=[record("rec1")]
        )

        assert len(self.client.list_records(self.table_id, limit=1)) == 1

    @responses.activate
    def test_create_record(self):
        self.mock_response(
            responses.POST,
            f"/table/{self.table_id}/record",
            json={"records": [record("rec9", name="new")]},
        )

        created = self.client.create_record(self.table_id, {"name": "new"})

        assert created == Record("rec9", {"name": "new"})
        self.assert_url_called(
            "POST",
            f"/table/{self.table_id}/record",
            json={"records": [{"fields": {"name": "new"}}]},
        )

    @responses.activate
    def test_update_record(self):
        self.mock_response(
            responses.PATCH,
            f"/table/{self.table_id}/record/rec1",
            json=record("rec1", name="b", area=3),
        )

        updated = self.client.update_record(self.table_id, "rec1", {"name": "b"})

        assert updated.fields == {"name": "b", "area": 3}
        self.assert_url_called(
            "PATCH",
            f"/table/{self.table_id}/record/rec1",
            json={"record": {"fields": {"name": "b"}}},
        )

    @responses.activate
    def test_update_record_rejected(self):
        self.mock_response(
            responses.PATCH,
            f"/table/{self.table_id}/record/rec1",
            status=400,
            json={"message": "invalid value"},
        )

        with self.assertRaisesRegex(BadRequestError, "invalid value"):
            self.client.update_record(self.table_id, "rec1", {"area": "x"})

    @responses.activate
    def test_delete_record(self):
        self.mock_response(responses.DELETE, f"/table/{self.table_id}/record/rec1")

        self.client.delete_record(self.table_id, "rec1")

        self.assert_url_called("DELETE", f"/table/{self.table_id}/record/rec1")

    @responses.activate
    def test_delete_missing_record(self):
        self.mock_response(
            responses.DELETE, f"/table/{self.table_id}/record/rec1", status=404
        )

        with self.assertRaises(NotFoundError):
            self.client.delete_record(self.table_id, "rec1")

    @responses.activate
    def test_list_fields(self):
        self.mock_response(
            responses.GET,
            f"/table/{self.table_id}/field",
            json={
                "fields": [
                    {"id": "fld1", "name": "name", "type": "singleLineText"},
                    {"id": "fld2", "name": "area", "type": "number"},
                    {"id": "fld3", "name": "active", "type": "checkbox"},
                    {"id": "fld4", "name": "surveyed", "type": "date"},
                ]
            },
        )

        fields = self.client.list_fields(self.table_id)

        assert fields == [
            FieldSchema(name="name", field_type=FieldType.TEXT, id="fld1"),
            FieldSchema(name="area", field_type=FieldType.NUMBER, id="fld2"),
            FieldSchema(name="active", field_type=FieldType.BOOLEAN, id="fld3"),
            FieldSchema(name="surveyed", field_type=FieldType.DATE, id="fld4"),
        ]

    @responses.activate
    def test_authorization_header(self):
        self.mock_response(responses.GET, f"/table/{self.table_id}/field", json=[])

        TableClient.get_default_client().list_fields(self.table_id)

        assert responses.calls[0].request.headers["Authorization"] == "Bearer secret"
