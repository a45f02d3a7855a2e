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

import pytest

from .. import Properties, Property
from ..filtering import (
    AndExpression,
    ContainsExpression,
    EqualsExpression,
    Expression,
    GreaterThanExpression,
    IsEmptyExpression,
    IsNotEmptyExpression,
    LessThanExpression,
    OrExpression,
    StartsWithExpression,
)


def test_generic_properties():
    properties = Properties()
    assert isinstance(properties.foo, Property)
    assert isinstance(properties["field with spaces"], Property)


def test_specific_properties():
    properties = Properties("foo")
    assert isinstance(properties.foo, Property)

    with pytest.raises(AttributeError):
        properties.bar


def test_property_operators():
    p = Properties()
    assert isinstance(p.status == "active", EqualsExpression)
    assert isinstance(p.pop > 5, GreaterThanExpression)
    assert isinstance(p.pop < 5, LessThanExpression)
    assert isinstance(p.name.contains("x"), ContainsExpression)
    assert isinstance(p.name.startswith("x"), StartsWithExpression)
    assert isinstance(p.name.isempty, IsEmptyExpression)
    assert isinstance(p.name.isnotempty, IsNotEmptyExpression)


def test_operators_registered():
    for op in (
        "equals",
        "contains",
        "starts_with",
        "greater_than",
        "less_than",
        "is_empty",
        "is_not_empty",
        "and",
        "or",
    ):
        assert op in Expression.operators()

    with pytest.raises(ValueError, match="Unknown filter operator"):
        Expression.for_operator("near")


def test_equals_ignores_case():
    expr = EqualsExpression("status", "Active")
    assert expr.evaluate({"status": "active"})
    assert expr.evaluate({"status": "ACTIVE"})
    assert not expr.evaluate({"status": "inactive"})
    assert not expr.evaluate({})


def test_equals_stringifies():
    assert EqualsExpression("count", "3").evaluate({"count": 3})
    assert EqualsExpression("flag", "true").evaluate({"flag": True})


def test_contains_and_starts_with():
    record = {"name": "Lake Victoria"}
    assert ContainsExpression("name", "VICT").evaluate(record)
    assert not ContainsExpression("name", "nile").evaluate(record)
    assert StartsWithExpression("name", "lake").evaluate(record)
    assert not StartsWithExpression("name", "victoria").evaluate(record)


def test_numeric():
    assert GreaterThanExpression("pop", 10).evaluate({"pop": "10.5"})
    assert not GreaterThanExpression("pop", 10).evaluate({"pop": 10})
    assert LessThanExpression("pop", "10").evaluate({"pop": 9})
    assert not LessThanExpression("pop", 10).evaluate({"pop": 11})


def test_numeric_non_numeric_is_false():
    assert not GreaterThanExpression("pop", 10).evaluate({"pop": "many"})
    assert not LessThanExpression("pop", 10).evaluate({"pop": "many"})
    assert not LessThanExpression("pop", 10).evaluate({"pop": None})
    assert not GreaterThanExpression("pop", "x").evaluate({"pop": 11})


def test_empty():
    assert IsEmptyExpression("note").evaluate({})
    assert IsEmptyExpression("note").evaluate({"note": None})
    assert IsEmptyExpression("note").evaluate({"note": "  "})
    assert not IsEmptyExpression("note").evaluate({"note": "x"})
    assert IsNotEmptyExpression("note").evaluate({"note": 0})
    assert not IsNotEmptyExpression("note").evaluate({"note": ""})


def test_evaluate_attributes():
    class Thing:
        status = "active"

    assert EqualsExpression("status", "active").evaluate(Thing())


def test_and_or():
    p = Properties()
    expr = (p.status == "active") & (p.pop > 100)
    assert isinstance(expr, AndExpression)
    assert expr.evaluate({"status": "active", "pop": 200})
    assert not expr.evaluate({"status": "active", "pop": 50})

    expr = (p.status == "active") | (p.pop > 100)
    assert isinstance(expr, OrExpression)
    assert expr.evaluate({"status": "closed", "pop": 200})
    assert not expr.evaluate({"status": "closed", "pop": 50})


def test_empty_and_is_true():
    assert AndExpression([]).evaluate({})


def test_serialize():
    p = Properties()
    expr = (p.status == "active") & p.note.isempty & (p.pop < 3)
    assert expr.serialize() == {
        "and": [
            {"equals": {"status": "active"}},
            {"is_empty": "note"},
            {"less_than": {"pop": 3}},
        ]
    }


def test_parse():
    p = Properties()
    expr = ((p.status == "active") & p.note.isnotempty) | p.name.startswith("A")
    parsed = Expression.parse(json.dumps(expr.serialize()))
    assert parsed.is_same(expr)


def test_parse_list_is_conjunction():
    parsed = Expression.parse(
        [{"contains": {"name": "lake"}}, {"greater_than": {"depth": 10}}]
    )
    assert isinstance(parsed, AndExpression)
    assert parsed.is_same(
        AndExpression(
            [ContainsExpression("name", "lake"), GreaterThanExpression("depth", 10)]
        )
    )


def test_parse_aliases():
    assert isinstance(Expression.parse({"eq": {"a": 1}}), EqualsExpression)
    assert isinstance(Expression.parse({"gt": {"a": 1}}), GreaterThanExpression)


def test_parse_errors():
    with pytest.raises(ValueError):
        Expression.parse(5)

    with pytest.raises(ValueError):
        Expression.parse({"equals": {"a": 1}, "contains": {"b": 2}})

    with pytest.raises(ValueError):
        Expression.parse({"equals": "a"})

    with pytest.raises(ValueError):
        Expression.parse({"is_empty": {"a": 1}})

    with pytest.raises(ValueError):
        Expression.parse({"and": {"a": 1}})


def test_duplicate_operator():
    with pytest.raises(ValueError, match="already taken"):

        class Duplicate(EqualsExpression):
            _operator = "contains"
