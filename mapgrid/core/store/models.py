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

import copy
from typing import Optional

from pydantic import BaseModel, ConfigDict
from strenum import StrEnum


class FieldType(StrEnum):
    """The value type of a record field.

    Attributes
    ----------
    NUMBER : enum
        Finite integer or floating point numbers.
    BOOLEAN : enum
        ``True`` or ``False``.
    DATE : enum
        Calendar dates, exchanged as ``YYYY-MM-DD`` text.
    TEXT : enum
        Anything else.
    """

    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TEXT = "text"


# Store field types that don't map onto TEXT
_STORE_FIELD_TYPES = {
    "number": FieldType.NUMBER,
    "rating": FieldType.NUMBER,
    "autoNumber": FieldType.NUMBER,
    "count": FieldType.NUMBER,
    "checkbox": FieldType.BOOLEAN,
    "boolean": FieldType.BOOLEAN,
    "date": FieldType.DATE,
    "createdTime": FieldType.DATE,
    "lastModifiedTime": FieldType.DATE,
}


class FieldSchema(BaseModel):
    """The name and value type of one table field."""

    model_config = ConfigDict(frozen=True)

    name: str
    field_type: FieldType = FieldType.TEXT
    id: Optional[str] = None

    @classmethod
    def from_store(cls, data):
        """Build a schema from a field description returned by the store."""
        return cls(
            name=data["name"],
            field_type=_STORE_FIELD_TYPES.get(data.get("type"), FieldType.TEXT),
            id=data.get("id"),
        )


class Record(object):
    """A record of a table: an identifier and a mapping of field values.

    Parameters
    ----------
    id : str
        The record identifier assigned by the store.
    fields : dict, optional
        The field values by field name.
    created_time : str, optional
        Creation timestamp as reported by the store.
    """

    def __init__(self, id, fields=None, created_time=None):
        self.id = id
        self.fields = dict(fields or {})
        self.created_time = created_time

    @classmethod
    def from_dict(cls, data):
        """Build a record from its store representation."""
        return cls(
            id=data["id"],
            fields=data.get("fields") or {},
            created_time=data.get("createdTime"),
        )

    def to_dict(self):
        data = {"id": self.id, "fields": copy.deepcopy(self.fields)}
        if self.created_time is not None:
            data["createdTime"] = self.created_time
        return data

    def get(self, name, default=None):
        """The value of field ``name``, or ``default`` when absent."""
        return self.fields.get(name, default)

    def copy(self):
        return Record(self.id, copy.deepcopy(self.fields), self.created_time)

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented

        return self.id == other.id and self.fields == other.fields

    __hash__ = None

    def __repr__(self):
        return "Record(id={!r}, fields={!r})".format(self.id, self.fields)
