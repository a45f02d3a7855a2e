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

"""Graduated and categorized classification of layer fields.

Classification is a pure function of the records of a layer. The result is
a symbology that the caller stores into new layer properties; styling a
feature then re-evaluates its membership with :py:func:`style_for_record`.
"""

import logging
import math
from collections import Counter

from strenum import StrEnum

from mapgrid.config import get_settings
from mapgrid.exceptions import ClassificationError

from ..common.values import as_number, as_text
from ..layers.properties import (
    CategorizedSymbology,
    Category,
    GraduatedSymbology,
    SingleSymbology,
    Style,
    SymbologyType,
    fallback_style,
)
from .ramps import category_colors, ramp_colors

logger = logging.getLogger(__name__)


class ClassificationMethod(StrEnum):
    """How graduated class breaks are computed.

    Attributes
    ----------
    EQUAL : enum
        Equal intervals between the minimum and the maximum.
    QUANTILE : enum
        Breaks at evenly spaced positions of the sorted values.
    NATURAL : enum
        Accepted for compatibility; computed as equal intervals.
    """

    EQUAL = "equal"
    QUANTILE = "quantile"
    NATURAL = "natural"


def _records(layer):
    # A layer or any iterable of records or field mappings
    records = getattr(layer, "records", layer)
    return [getattr(record, "fields", record) for record in records]


def numeric_values(layer, field):
    """The finite numeric values of a field, ignoring anything else."""
    values = []

    for fields in _records(layer):
        number = as_number(fields.get(field))
        if number is not None:
            values.append(number)

    return values


def category_value(value):
    """The category key of a field value, or ``None`` for empty values."""
    text = as_text(value)
    return text if text.strip() else None


def _equal_breaks(minimum, maximum, class_count):
    interval = (maximum - minimum) / class_count
    if not math.isfinite(interval):
        interval = maximum / class_count - minimum / class_count

    # Ranges narrower than the float resolution collapse onto equal breaks.
    breaks = []
    for i in range(1, class_count + 1):
        value = maximum if i == class_count else min(minimum + interval * i, maximum)
        if not breaks or value > breaks[-1]:
            breaks.append(value)

    return breaks


def _quantile_breaks(values, class_count):
    n = len(values)
    breaks = []

    for i in range(1, class_count + 1):
        value = values[(n - 1) * i // class_count]
        if not breaks or value > breaks[-1]:
            breaks.append(value)

    return breaks


def compute_graduated(
    layer, field, class_count=5, color_ramp=None, method=ClassificationMethod.EQUAL
):
    """Classify the numeric values of a field into ordered ranges.

    Parameters
    ----------
    layer : Layer or list(Record)
        The records to classify.
    field : str
        The field to classify. Values that aren't finite numbers are ignored.
    class_count : int
        The number of classes.
    color_ramp : str, optional
        The name of the color ramp. Defaults to the ``default_color_ramp``
        setting.
    method : str or ClassificationMethod
        How breaks are computed.

    Returns
    -------
    GraduatedSymbology
        ``breaks[i]`` is the inclusive upper bound of class ``i``; the last
        break is the maximum value. Classes whose breaks coincide are
        merged, so there may be fewer than ``class_count``.

    Raises
    ------
    ClassificationError
        If the field holds no numeric values or all values are equal.
    """
    if class_count < 1:
        raise ValueError("class_count must be at least 1, got {}".format(class_count))

    method = ClassificationMethod(method)
    if color_ramp is None:
        color_ramp = get_settings().default_color_ramp

    values = sorted(numeric_values(layer, field))

    if not values:
        logger.warning("No numeric values found in field %r", field)
        raise ClassificationError("No numeric values found in field {!r}".format(field))

    minimum, maximum = values[0], values[-1]
    if minimum == maximum:
        logger.warning("All values of field %r are equal to %s", field, minimum)
        raise ClassificationError(
            "All values of field {!r} are equal ({}), nothing to classify".format(
                field, minimum
            )
        )

    if method is ClassificationMethod.QUANTILE:
        breaks = _quantile_breaks(values, class_count)
    else:
        breaks = _equal_breaks(minimum, maximum, class_count)

    if len(breaks) < class_count:
        logger.info(
            "Merged %d classes of field %r into %d distinct breaks",
            class_count,
            field,
            len(breaks),
        )

    return GraduatedSymbology(
        field=field,
        class_count=len(breaks),
        breaks=breaks,
        colors=ramp_colors(color_ramp, len(breaks)),
        min=minimum,
        max=maximum,
        method=str(method),
        color_ramp=color_ramp,
    )


def compute_categorized(layer, field):
    """Classify the distinct values of a field.

    Values are stringified; empty values are ignored. Categories are sorted
    by value and colored by an even rotation around the hue circle.

    Raises
    ------
    ClassificationError
        If the field holds no values.
    """
    counts = Counter()

    for fields in _records(layer):
        value = category_value(fields.get(field))
        if value is not None:
            counts[value] += 1

    if not counts:
        logger.warning("No values found in field %r", field)
        raise ClassificationError("No values found in field {!r}".format(field))

    values = sorted(counts)
    colors = category_colors(len(values))

    return CategorizedSymbology(
        field=field,
        categories=[
            Category(value=value, color=color, label=value, count=counts[value])
            for value, color in zip(values, colors)
        ],
    )


def classify(layer, mode, field=None, **params):
    """Compute the symbology of a layer for a classification mode.

    Parameters
    ----------
    layer : Layer
        The layer to classify.
    mode : str or SymbologyType
        ``single``, ``graduated`` or ``categorized``.
    field : str, optional
        The field to classify; required unless ``mode`` is ``single``.
    params
        Passed on to :py:func:`compute_graduated` (``class_count``,
        ``color_ramp``, ``method``) or, for ``single``, to
        :py:class:`~mapgrid.core.layers.properties.SingleSymbology`. Not
        accepted for ``categorized``.

    Raises
    ------
    ClassificationError
        If the field can't be classified.
    """
    mode = SymbologyType(mode)

    if mode is SymbologyType.SINGLE:
        return SingleSymbology(**params)

    if not field:
        raise ValueError("A field is required for {} classification".format(mode))

    if mode is SymbologyType.GRADUATED:
        return compute_graduated(layer, field, **params)

    if params:
        raise ValueError(
            "{} classification takes no parameters, got {}".format(
                mode, ", ".join(sorted(params))
            )
        )

    return compute_categorized(layer, field)


def bucket_index(value, breaks):
    """The class of a value given the upper bounds of the classes.

    Values above the last break fall into the last class. Returns ``None``
    for values that aren't numbers.
    """
    number = as_number(value)
    if number is None or not breaks:
        return None

    for index, upper in enumerate(breaks):
        if number <= upper:
            return index

    return len(breaks) - 1


def style_for_record(fields, symbology):
    """The render style of a record under a symbology.

    Records whose value can't be placed get the fallback style.
    """
    fields = getattr(fields, "fields", fields)

    if isinstance(symbology, SingleSymbology):
        return symbology.style

    if isinstance(symbology, GraduatedSymbology):
        index = bucket_index(fields.get(symbology.field), symbology.breaks)
        if index is None:
            return fallback_style()

        color = symbology.colors[index]
    elif isinstance(symbology, CategorizedSymbology):
        category = symbology.category_for(category_value(fields.get(symbology.field)))
        if category is None:
            return fallback_style()

        color = category.color
    else:
        raise TypeError("Unknown symbology {!r}".format(symbology))

    return Style(
        fill_color=color,
        border_color=color,
        border_width=symbology.border_width,
        fill_opacity=symbology.fill_opacity,
    )


def legend(symbology):
    """The ``(label, color)`` rows describing the classes of a symbology."""
    if isinstance(symbology, SingleSymbology):
        return [("All features", symbology.fill_color)]

    if isinstance(symbology, GraduatedSymbology):
        lowers = (symbology.min,) + tuple(symbology.breaks[:-1])
        return [
            ("{:.2f} - {:.2f}".format(lower, upper), color)
            for lower, upper, color in zip(lowers, symbology.breaks, symbology.colors)
        ]

    if isinstance(symbology, CategorizedSymbology):
        return [(category.label, category.color) for category in symbology.categories]

    raise TypeError("Unknown symbology {!r}".format(symbology))
