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
from collections.abc import Mapping
from typing import Any, Dict, List, Tuple, Type, TypeVar, Union

from ..values import as_number, as_text

AnyExpression = TypeVar("AnyExpression", bound="Expression")


def _lookup(obj, name):
    # Records are plain field mappings; anything else is read by attribute
    if isinstance(obj, Mapping):
        return obj.get(name)

    return getattr(obj, name, None)


class Expression(object):
    """An expression is the result of a filtering operation on record fields.

    An expression contains a field name, an operator and, for most operators, a
    value:

        | ``field`` ``operator`` ``value``

    where the operator can be

    * ``equals`` (case-insensitive text comparison)
    * ``contains`` (case-insensitive substring)
    * ``starts_with`` (case-insensitive prefix)
    * ``greater_than``, ``less_than`` (numeric, non-numeric values never match)
    * ``is_empty``, ``is_not_empty`` (no value is needed)

    Expressions can be combined using the Boolean operators ``&`` and ``|`` to form
    larger expressions. Because of operator precedence, you must bracket
    expressions with ``(`` and ``)`` to avoid unexpected behavior.

    Every expression can be serialized into a JSON compatible structure with
    :py:meth:`serialize` and parsed back with :py:meth:`Expression.parse`.

    Examples
    --------
    >>> from mapgrid.core.common.property_filtering import Properties
    >>> p = Properties()
    >>> e = p.status == "active"
    >>> type(e)
    <class 'mapgrid.core.common.property_filtering.filtering.EqualsExpression'>
    >>> e = (p.status == "active") & (p.population > 1000)
    >>> type(e)
    <class 'mapgrid.core.common.property_filtering.filtering.AndExpression'>
    >>> e.evaluate({"status": "Active", "population": "2500"})
    True
    """

    __abstract__: bool = False
    _aliases: List[str] = None
    _registry: Dict[str, Type[AnyExpression]] = dict()
    _operator: str = None

    def __init_subclass__(cls) -> None:
        # Abstract bases declare __abstract__ in their own body
        if cls.__dict__.get("__abstract__", False):
            return

        if not cls.__dict__.get("_operator"):
            cls._operator = cls.__name__[: -len("Expression")].lower()

        for operator in [cls._operator, *(cls._aliases or [])]:
            registered = cls._registry.setdefault(operator, cls)

            if registered is not cls:
                raise ValueError(
                    "Operator {!r} is already taken by {}".format(
                        operator, registered.__name__
                    )
                )

    @classmethod
    def operators(cls) -> List[str]:
        """The registered operator names, including aliases."""
        return sorted(cls._registry)

    @classmethod
    def for_operator(cls, operator: str) -> Type[AnyExpression]:
        """Look up the expression class registered for an operator.

        Raises
        ------
        ValueError
            If the operator is unknown.
        """
        try:
            return cls._registry[operator]
        except KeyError:
            raise ValueError(f"Unknown filter operator: {operator}") from None

    def serialize(self):
        raise NotImplementedError

    def evaluate(self, obj) -> bool:
        raise NotImplementedError

    def is_same(self, other: Any) -> bool:
        """Whether `other` is the same expression, part by part.

        ``a & b`` and ``b & a`` always evaluate alike but are not the same.
        """
        return type(self) is type(other)

    @classmethod
    def parse(
        cls, data: Union[str, Dict[str, Any], List[Dict[str, Any]]]
    ) -> AnyExpression:
        """Rebuild an expression from its serialized form.

        Parameters
        ----------
        data: str or dict or list
            The output of :py:meth:`serialize`, optionally as a JSON string. A
            list is read as the conjunction of its items.

        Raises
        ------
        ValueError
            If `data` is not a serialized expression.
        """
        if isinstance(data, str):
            data = json.loads(data)

        if isinstance(data, list):
            return AndExpression([cls.parse(item) for item in data])

        operator, operand = _single_item(data, "filter expression")
        return cls.for_operator(operator)._parse(operand)

    @classmethod
    def _parse(cls, operand) -> AnyExpression:
        """Build an expression of this type from its serialized operand."""
        raise NotImplementedError(f"{cls.__name__}: {operand}")


def _single_item(data, what):
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"Invalid {what}: {data!r}")

    return next(iter(data.items()))


class OpExpression(Expression):
    """Base class for expressions that have a field name and a value."""

    __abstract__ = True

    def __init__(self, name, value):
        self.name = name
        self.value = value

    def is_same(self, other: Any) -> bool:
        return (
            super().is_same(other)
            and self.name == other.name
            and self.value == other.value
        )

    def __and__(self, other):
        return AndExpression([self]) & other

    def __or__(self, other):
        return OrExpression([self]) | other

    def __repr__(self):
        return "<{} {}={!r}>".format(type(self).__name__, self.name, self.value)

    def serialize(self):
        return {self._operator: {self.name: self.value}}

    @classmethod
    def _parse(cls, operand) -> AnyExpression:
        name, value = cls._field_and_value(operand)

        if not name:
            raise ValueError(f"Invalid {cls._operator} expression: {operand!r}")

        return cls(name, value)

    @classmethod
    def _field_and_value(cls, operand) -> Tuple[str, Any]:
        return _single_item(operand, f"{cls._operator} operand")


class TextExpression(OpExpression):
    """Base class for case-insensitive text comparisons."""

    __abstract__ = True

    def evaluate(self, obj):
        return self._compare(
            as_text(_lookup(obj, self.name)).lower(), as_text(self.value).lower()
        )

    def _compare(self, field_text, value_text):
        raise NotImplementedError


class NumericExpression(OpExpression):
    """Base class for numeric comparisons.

    A field value or comparison value that doesn't parse as a finite number
    never matches.
    """

    __abstract__ = True

    def evaluate(self, obj):
        field_number = as_number(_lookup(obj, self.name))
        value_number = as_number(self.value)

        if field_number is None or value_number is None:
            return False

        return self._compare(field_number, value_number)

    def _compare(self, field_number, value_number):
        raise NotImplementedError


class EqualsExpression(TextExpression):
    """Whether a field value equals the given value, ignoring case."""

    _aliases = ["eq"]

    def _compare(self, field_text, value_text):
        return field_text == value_text


class ContainsExpression(TextExpression):
    """Whether a field value contains the given text, ignoring case."""

    def _compare(self, field_text, value_text):
        return value_text in field_text


class StartsWithExpression(TextExpression):
    """Whether a field value starts with the given text, ignoring case."""

    _operator = "starts_with"
    _aliases = ["prefix"]

    def _compare(self, field_text, value_text):
        return field_text.startswith(value_text)


class GreaterThanExpression(NumericExpression):
    """Whether a numeric field value is larger than the given number."""

    _operator = "greater_than"
    _aliases = ["gt"]

    def _compare(self, field_number, value_number):
        return field_number > value_number


class LessThanExpression(NumericExpression):
    """Whether a numeric field value is smaller than the given number."""

    _operator = "less_than"
    _aliases = ["lt"]

    def _compare(self, field_number, value_number):
        return field_number < value_number


class IsEmptyExpression(OpExpression):
    """Whether a field value is absent, ``None`` or blank text."""

    _operator = "is_empty"

    def __init__(self, name, value=None):
        super(IsEmptyExpression, self).__init__(name, None)

    def __repr__(self):
        return "<{} {}>".format(type(self).__name__, self.name)

    def serialize(self):
        return {self._operator: self.name}

    def evaluate(self, obj):
        return as_text(_lookup(obj, self.name)).strip() == ""

    @classmethod
    def _field_and_value(cls, operand) -> Tuple[str, Any]:
        if not isinstance(operand, str):
            raise ValueError(f"Invalid {cls._operator} operand: {operand!r}")

        return operand, None


class IsNotEmptyExpression(IsEmptyExpression):
    """Whether a field value is present and not blank."""

    _operator = "is_not_empty"

    def evaluate(self, obj):
        return not super(IsNotEmptyExpression, self).evaluate(obj)


class LogicalExpression(Expression):
    """Base class for logical expressions that have sub expressions."""

    __abstract__ = True

    def __init__(self, parts):
        self.parts = list(parts)

    def __repr__(self):
        return "<{} {}>".format(type(self).__name__, self.parts)

    def serialize(self):
        return {self._operator: [x.serialize() for x in self.parts]}

    def is_same(self, other: Any) -> bool:
        return (
            super().is_same(other)
            and len(self.parts) == len(other.parts)
            and all(a.is_same(b) for a, b in zip(self.parts, other.parts))
        )

    def _extend(self, other):
        # Chaining the same operator flattens into one expression
        if isinstance(other, type(self)):
            self.parts.extend(other.parts)
        elif isinstance(other, Expression):
            self.parts.append(other)
        else:
            raise TypeError("Invalid sub-expression")

        return self

    @classmethod
    def _parse(cls, operand) -> AnyExpression:
        if not isinstance(operand, list):
            raise ValueError(f"Invalid {cls._operator} operand: {operand!r}")

        return cls([Expression.parse(part) for part in operand])


class AndExpression(LogicalExpression):
    """``True`` if all expressions are ``True``, ``False`` otherwise.

    An empty conjunction is ``True``.
    """

    def __and__(self, other):
        return self._extend(other)

    __rand__ = __and__

    def __or__(self, other):
        return OrExpression([self]) | other

    def evaluate(self, obj):
        return all(part.evaluate(obj) for part in self.parts)


class OrExpression(LogicalExpression):
    """``True`` if any expression is ``True``, ``False`` otherwise."""

    def __and__(self, other):
        return AndExpression([self]) & other

    def __or__(self, other):
        return self._extend(other)

    __ror__ = __or__

    def evaluate(self, obj):
        return any(part.evaluate(obj) for part in self.parts)


class Property(object):
    """A record field to build expressions from.

    Comparing a property yields an expression; :py:class:`Properties` hands
    them out by attribute name.

    Examples
    --------
    >>> e = Property("population") > 1000
    """

    def __init__(self, name):
        self.name = name

    def __eq__(self, other):
        return EqualsExpression(self.name, other)

    def __gt__(self, other):
        return GreaterThanExpression(self.name, other)

    def __lt__(self, other):
        return LessThanExpression(self.name, other)

    __hash__ = None

    def __repr__(self):
        return "<Property {}>".format(self.name)

    def contains(self, text):
        """Match a case-insensitive substring."""
        return ContainsExpression(self.name, text)

    def startswith(self, prefix):
        """Match a case-insensitive prefix."""
        return StartsWithExpression(self.name, prefix)

    @property
    def isempty(self):
        """Whether the field value is absent or blank."""
        return IsEmptyExpression(self.name)

    @property
    def isnotempty(self):
        """Whether the field value is present and not blank."""
        return IsNotEmptyExpression(self.name)


class Properties(object):
    """Field properties by attribute access.

    Any attribute name gives the :py:class:`Property` of that field, unless
    field names were given, in which case only those are known.

    Parameters
    ----------
    name: str
        The field names that are allowed, each as a positional parameter.

    Examples
    --------
    >>> p = Properties("status", "population")
    >>> e = p.status == "active"
    >>> e = p.deleted == "yes"  # doctest: +SKIP
    Traceback (most recent call last):
      ...
    AttributeError: 'Properties' object has no attribute 'deleted'
    """

    def __init__(self, *args):
        self.props = args

    def __getattr__(self, attr):
        # keep sphinx happy
        if attr == "__qualname__":
            return self.__class__.__qualname__

        if not self.props or attr in self.props:
            return Property(attr)

        raise AttributeError("'Properties' object has no attribute '{}'".format(attr))

    def __getitem__(self, name):
        # Field names are not always valid identifiers
        return Property(name)
