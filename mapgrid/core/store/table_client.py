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
import logging

from mapgrid.config import get_settings

from ..common.http.service import DefaultClientMixin, Service
from ..common.property_filtering import Expression
from .models import FieldSchema, Record
from .store import RecordStore

logger = logging.getLogger(__name__)


class TableClient(Service, DefaultClientMixin, RecordStore):
    """Client for the tabular record store HTTP API.

    Records are exchanged as ``{"id": ..., "fields": {...}}`` objects under
    ``/table/<table_id>/record``; field descriptions live under
    ``/table/<table_id>/field``.

    Parameters
    ----------
    url : str, optional
        The store API URL. Defaults to the ``store_url`` setting.
    token : str, optional
        Bearer token. Defaults to the ``store_token`` setting.
    timeout : float, optional
        Request timeout in seconds. Defaults to the ``store_timeout`` setting.
    page_size : int, optional
        Number of records fetched per request when listing all records.
        Defaults to the ``store_page_size`` setting.
    """

    def __init__(self, url=None, token=None, timeout=None, page_size=None):
        settings = get_settings()

        if token is None:
            token = settings.get("store_token") or None

        if page_size is None:
            page_size = settings.store_page_size

        super().__init__(url, token=token, timeout=timeout)
        self.page_size = page_size

    def list_records(self, table_id, limit=None, offset=None, filter=None, sort=None):
        """List the records of a table.

        When ``limit`` is omitted all records are fetched, ``page_size``
        records per request.

        Parameters
        ----------
        table_id : str
            The table to list.
        limit : int, optional
            Maximum number of records to return.
        offset : int, optional
            Number of records to skip.
        filter : dict or Expression, optional
            A store-side filter. Expressions are sent in serialized form.
        sort : str or list, optional
            A store-side sort order.

        Returns
        -------
        list(Record)
        """
        params = {}

        if filter is not None:
            if isinstance(filter, Expression):
                filter = filter.serialize()
            params["filter"] = json.dumps(filter)

        if sort is not None:
            params["sort"] = sort if isinstance(sort, str) else json.dumps(sort)

        offset = offset or 0

        if limit is not None:
            return self._list_page(table_id, params, limit, offset)

        records = []
        while True:
            page = self._list_page(table_id, params, self.page_size, offset)
            records.extend(page)

            if len(page) < self.page_size:
                break

            offset += len(page)

        logger.debug("Listed %d records of table %s", len(records), table_id)
        return records

    def _list_page(self, table_id, params, limit, offset):
        params = dict(params, limit=limit)
        if offset:
            params["offset"] = offset

        response = self.session.get(f"/table/{table_id}/record", params=params)
        body = response.json()

        if isinstance(body, dict):
            body = body.get("records") or []

        return [Record.from_dict(data) for data in body]

    def create_record(self, table_id, fields):
        """Create a record and return it as created by the store."""
        response = self.session.post(
            f"/table/{table_id}/record",
            json={"records": [{"fields": fields}]},
        )
        body = response.json()

        if isinstance(body, dict) and "records" in body:
            body = body["records"][0]

        return Record.from_dict(body)

    def update_record(self, table_id, record_id, fields):
        """Update the given fields of a record and return the whole record."""
        response = self.session.patch(
            f"/table/{table_id}/record/{record_id}",
            json={"record": {"fields": fields}},
        )

        return Record.from_dict(response.json())

    def delete_record(self, table_id, record_id):
        self.session.delete(f"/table/{table_id}/record/{record_id}")

    def list_fields(self, table_id):
        response = self.session.get(f"/table/{table_id}/field")
        body = response.json()

        if isinstance(body, dict):
            body = body.get("fields") or []

        return [FieldSchema.from_store(data) for data in body]
