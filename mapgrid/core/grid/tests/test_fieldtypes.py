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

import datetime

import pytest

from ...store import FieldType, Record
from ..fieldtypes import (
    convert_value,
    detect_field_type,
    infer_field_type,
    infer_schema,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, FieldType.BOOLEAN),
        (3, FieldType.NUMBER),
        (2.5, FieldType.NUMBER),
        ("12.5", FieldType.NUMBER),
        ("2024-03-01", FieldType.DATE),
        ("2024-03-01T10:00:00Z", FieldType.DATE),
        (datetime.date(2024, 3, 1), FieldType.DATE),
        ("hello", FieldType.TEXT),
        ("nan", FieldType.TEXT),
        (None, None),
        ("  ", None),
    ],
)
def test_detect_field_type(value, expected):
    assert detect_field_type(value) == expected


def test_infer_from_first_non_empty():
    assert infer_field_type([None, "", 4, "x"]) is FieldType.NUMBER
    assert infer_field_type(["x", 4]) is FieldType.TEXT
    assert infer_field_type([None, ""]) is None


def test_infer_schema():
    records = [
        Record("a", {"name": "x", "count": None, "empty": None}),
        Record("b", {"count": "3", "done": False, "geometry": "POINT(1 1)"}),
    ]
    schema = infer_schema(records, exclude=["geometry"])

    assert list(schema) == ["name", "count", "done"]
    assert schema["count"].field_type is FieldType.NUMBER
    assert schema["done"].field_type is FieldType.BOOLEAN


@pytest.mark.parametrize(
    "value, expected",
    [
        ("42", 42),
        (" -7 ", -7),
        ("3.25", 3.25),
        ("1e3", 1000.0),
        (5, 5),
        (2.5, 2.5),
    ],
)
def test_convert_number(value, expected):
    result = convert_value(value, FieldType.NUMBER)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize("value", ["abc", "12abc", "inf", True, float("nan")])
def test_convert_number_invalid(value):
    with pytest.raises(ValueError):
        convert_value(value, "number")


@pytest.mark.parametrize(
    "value, expected",
    [("true", True), ("Yes", True), ("1", True), ("off", False), (False, False)],
)
def test_convert_boolean(value, expected):
    assert convert_value(value, FieldType.BOOLEAN) is expected


def test_convert_boolean_invalid():
    with pytest.raises(ValueError):
        convert_value("maybe", FieldType.BOOLEAN)


def test_convert_date():
    assert convert_value("2024-02-29", FieldType.DATE) == "2024-02-29"
    assert convert_value(datetime.date(2024, 1, 2), FieldType.DATE) == "2024-01-02"
    assert (
        convert_value(datetime.datetime(2024, 1, 2, 3, 4), FieldType.DATE)
        == "2024-01-02"
    )

    for value in ("2023-02-29", "02/03/2024", "2024-1-2", "2024-01-02T00:00"):
        with pytest.raises(ValueError):
            convert_value(value, FieldType.DATE)


def test_convert_text():
    assert convert_value("abc", FieldType.TEXT) == "abc"
    assert convert_value(12, FieldType.TEXT) == "12"


def test_empty_clears():
    for field_type in FieldType:
        assert convert_value("", field_type) is None
        assert convert_value(None, field_type) is None


def test_unknown_type():
    with pytest.raises(ValueError):
        convert_value("x", "geometry")
