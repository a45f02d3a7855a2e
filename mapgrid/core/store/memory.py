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

import uuid

from mapgrid.exceptions import NotFoundError

from ..common.property_filtering import Expression
from .models import FieldSchema, Record
from .store import RecordStore


class MemoryStore(RecordStore):
    """A record store that keeps its tables in memory.

    Useful for offline work and as a test double. Records handed out are
    copies, so callers can't change the stored state behind the store's back.

    Parameters
    ----------
    tables : dict, optional
        Initial records by table id, each a list of :py:class:`Record` or of
        ``{"id": ..., "fields": ...}`` dicts.
    fields : dict, optional
        :py:class:`FieldSchema` lists by table id. Tables without an entry
        report the field names found in their records as text fields.
    """

    def __init__(self, tables=None, fields=None):
        self._tables = {}
        self._fields = dict(fields or {})

        for table_id, records in (tables or {}).items():
            self.add_table(table_id, records)

    def add_table(self, table_id, records=()):
        table = self._tables[table_id] = {}

        for record in records:
            if not isinstance(record, Record):
                record = Record.from_dict(record)
            table[record.id] = record.copy()

    def _table(self, table_id):
        try:
            return self._tables[table_id]
        except KeyError:
            raise NotFoundError("Table {} not found".format(table_id)) from None

    def _record(self, table_id, record_id):
        try:
            return self._table(table_id)[record_id]
        except KeyError:
            raise NotFoundError(
                "Record {} not found in table {}".format(record_id, table_id)
            ) from None

    def list_records(self, table_id, limit=None, offset=None, filter=None, sort=None):
        records = list(self._table(table_id).values())

        if filter is not None:
            if not isinstance(filter, Expression):
                filter = Expression.parse(filter)
            records = [record for record in records if filter.evaluate(record.fields)]

        if sort:
            descending = sort.startswith("-")
            name = sort.lstrip("-")
            present = [r for r in records if r.get(name) is not None]
            missing = [r for r in records if r.get(name) is None]
            present.sort(
                key=lambda r: (isinstance(r.get(name), str), r.get(name)),
                reverse=descending,
            )
            records = present + missing

        offset = offset or 0
        end = None if limit is None else offset + limit

        return [record.copy() for record in records[offset:end]]

    def create_record(self, table_id, fields):
        table = self._table(table_id)
        record = Record("rec" + uuid.uuid4().hex[:16], fields)
        table[record.id] = record

        return record.copy()

    def update_record(self, table_id, record_id, fields):
        record = self._record(table_id, record_id)
        record.fields.update(fields)

        return record.copy()

    def delete_record(self, table_id, record_id):
        self._record(table_id, record_id)
        del self._tables[table_id][record_id]

    def list_fields(self, table_id):
        if table_id in self._fields:
            return list(self._fields[table_id])

        names = {}
        for record in self._table(table_id).values():
            for name in record.fields:
                names.setdefault(name, None)

        return [FieldSchema(name=name) for name in names]
