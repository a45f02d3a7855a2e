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

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from strenum import StrEnum

from ..common.property_filtering import AndExpression, Expression

logger = logging.getLogger(__name__)


class FilterOperator(StrEnum):
    """The comparison of a filter rule.

    Text operators compare case-insensitively; numeric operators never
    match values that aren't numbers.
    """

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class FilterRule(BaseModel):
    """A single ``field operator value`` predicate on the records of a layer.

    Parameters
    ----------
    field : str
        The record field to test.
    operator : FilterOperator
        The comparison.
    value : any, optional
        The value to compare with; unused by the emptiness operators.
    layer_id : str, optional
        The layer the rule is scoped to; ``None`` applies it to every layer.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: FilterOperator
    value: Any = None
    layer_id: Optional[str] = None

    def applies_to(self, layer):
        return self.layer_id is None or self.layer_id == layer.id

    def to_expression(self):
        """The property filter expression of this rule."""
        return Expression.for_operator(str(self.operator))(self.field, self.value)


def as_rule(rule):
    """A :py:class:`FilterRule` from a rule or a rule mapping."""
    if isinstance(rule, FilterRule):
        return rule

    if isinstance(rule, Mapping):
        data = dict(rule)
        # Accept the camel-cased key of stored rules
        if "layerId" in data:
            data.setdefault("layer_id", data.pop("layerId"))
        return FilterRule(**data)

    raise TypeError(
        "A filter rule must be a FilterRule or a dict, not {}".format(
            type(rule).__name__
        )
    )


def compile_rules(rules, layer=None):
    """Combine rules into one conjunctive expression.

    Parameters
    ----------
    rules : iterable(FilterRule or dict)
        The rules.
    layer : Layer, optional
        Only the rules scoped to this layer are used.

    Returns
    -------
    AndExpression
        The conjunction; an empty conjunction matches everything.
    """
    rules = [as_rule(rule) for rule in rules]

    if layer is not None:
        rules = [rule for rule in rules if rule.applies_to(layer)]

    return AndExpression([rule.to_expression() for rule in rules])


def apply_filters(layer, rules, surface):
    """Show the features of a layer whose record matches every rule.

    Features that don't match are hidden on the surface, never removed from
    the layer. An empty rule set shows every feature. A hidden layer is left
    untouched.

    Parameters
    ----------
    layer : Layer
        The layer to filter.
    rules : iterable(FilterRule or dict)
        The rules; rules scoped to other layers are ignored.
    surface : RenderSurface
        The surface the features are shown on.

    Returns
    -------
    int
        The number of features left visible.
    """
    if not layer.visible:
        return 0

    expression = compile_rules(rules, layer=layer)
    visible = 0

    for feature in layer.features:
        if expression.evaluate(feature.record.fields):
            surface.show(feature)
            visible += 1
        else:
            surface.hide(feature)

    logger.debug(
        "Filtered layer %s: %d of %d features visible",
        layer.id,
        visible,
        len(layer.features),
    )

    return visible
