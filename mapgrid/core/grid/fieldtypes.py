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

"""Field type inference and conversion of typed grid input."""

import datetime
import math
import re

from ..common.values import as_number
from ..store import FieldSchema, FieldType

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

TRUE_TEXT = frozenset(["true", "yes", "1", "on"])
FALSE_TEXT = frozenset(["false", "no", "0", "off"])


def _is_empty(value):
    return value is None or (isinstance(value, str) and not value.strip())


def detect_field_type(value):
    """The field type a single value looks like, or ``None`` if it's empty."""
    if _is_empty(value):
        return None

    if isinstance(value, bool):
        return FieldType.BOOLEAN

    if isinstance(value, (int, float)):
        return FieldType.NUMBER

    if isinstance(value, (datetime.date, datetime.datetime)):
        return FieldType.DATE

    if isinstance(value, str):
        if as_number(value) is not None:
            return FieldType.NUMBER

        if _DATE_PREFIX_RE.match(value.strip()):
            return FieldType.DATE

    return FieldType.TEXT


def infer_field_type(values):
    """The type of a column from its first non-empty value.

    Returns ``None`` if every value is empty.
    """
    for value in values:
        field_type = detect_field_type(value)
        if field_type is not None:
            return field_type

    return None


def infer_schema(records, exclude=()):
    """Infer a :py:class:`FieldSchema` for every field of some records.

    Fields are returned in the order they first appear. Fields without any
    non-empty value are left out, their type is decided on input.
    """
    names = []
    for record in records:
        for name in record.fields:
            if name not in names and name not in exclude:
                names.append(name)

    schema = {}
    for name in names:
        field_type = infer_field_type(record.fields.get(name) for record in records)
        if field_type is not None:
            schema[name] = FieldSchema(name=name, field_type=field_type)

    return schema


def _to_number(value):
    if isinstance(value, bool):
        raise ValueError("expected a number, not a boolean")

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("expected a finite number")
        return value

    text = str(value).strip()
    number = as_number(text)

    if number is None:
        raise ValueError("expected a number")

    if _INTEGER_RE.match(text):
        return int(text)

    return number


def _to_boolean(value):
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()

    if text in TRUE_TEXT:
        return True

    if text in FALSE_TEXT:
        return False

    raise ValueError("expected true or false")


def _to_date(value):
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()

    if isinstance(value, datetime.date):
        return value.isoformat()

    text = str(value).strip()

    if not _DATE_RE.match(text):
        raise ValueError("expected a date as YYYY-MM-DD")

    try:
        datetime.date.fromisoformat(text)
    except ValueError:
        raise ValueError("{} is not a calendar date".format(text)) from None

    return text


_CONVERTERS = {
    FieldType.NUMBER: _to_number,
    FieldType.BOOLEAN: _to_boolean,
    FieldType.DATE: _to_date,
    FieldType.TEXT: str,
}


def convert_value(value, field_type):
    """Convert typed input to a value of a field type.

    Empty input converts to ``None`` for every type, which clears the field.

    Parameters
    ----------
    value : any
        The input, usually text.
    field_type : FieldType or str
        The type to convert to.

    Returns
    -------
    any
        A number, boolean, ``YYYY-MM-DD`` text or text.

    Raises
    ------
    ValueError
        If the input can't be converted.
    """
    field_type = FieldType(field_type)

    if _is_empty(value):
        return None

    return _CONVERTERS[field_type](value)
