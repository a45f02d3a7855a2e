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

"""Color ramps and generated category colors."""

import colorsys
import logging

logger = logging.getLogger(__name__)

# Sequential ColorBrewer ramps, light to dark
RAMPS = {
    "blues": (
        "#f7fbff", "#deebf7", "#c6dbef", "#9ecae1", "#6baed6",
        "#4292c6", "#2171b5", "#08519c", "#08306b",
    ),
    "greens": (
        "#f7fcf5", "#e5f5e0", "#c7e9c0", "#a1d99b", "#74c476",
        "#41ab5d", "#238b45", "#006d2c", "#00441b",
    ),
    "reds": (
        "#fff5f0", "#fee0d2", "#fcbba1", "#fc9272", "#fb6a4a",
        "#ef3b2c", "#cb181d", "#a50f15", "#67000d",
    ),
    "oranges": (
        "#fff5eb", "#fee6ce", "#fdd0a2", "#fdae6b", "#fd8d3c",
        "#f16913", "#d94801", "#a63603", "#7f2704",
    ),
    "purples": (
        "#fcfbfd", "#efedf5", "#dadaeb", "#bcbddc", "#9e9ac8",
        "#807dba", "#6a51a3", "#54278f", "#3f007d",
    ),
}  # fmt: skip

CATEGORY_SATURATION = 0.7
CATEGORY_LIGHTNESS = (0.5, 0.4, 0.6)


def ramp_names():
    return sorted(RAMPS)


def ramp_colors(name, count):
    """``count`` colors sampled from the named ramp, light to dark.

    Stops are sampled evenly; when ``count`` exceeds the number of stops the
    nearest lower stop repeats. Unknown ramp names fall back to ``blues``.
    A single class gets the darkest stop.
    """
    if count < 1:
        raise ValueError("count must be at least 1, got {}".format(count))

    ramp = RAMPS.get(name)
    if ramp is None:
        logger.warning("Unknown color ramp %r, using 'blues'", name)
        ramp = RAMPS["blues"]

    if count == 1:
        return [ramp[-1]]

    last = len(ramp) - 1
    return [ramp[last * i // (count - 1)] for i in range(count)]


def _rgb_to_hex(rgb):
    r, g, b = (max(0, min(255, int(round(c * 255.0)))) for c in rgb)
    return "#{:02x}{:02x}{:02x}".format(r, g, b)


def category_hue(index, count):
    """The hue in degrees of category ``index`` out of ``count``."""
    return index * 360.0 / count


def category_colors(count):
    """``count`` colors evenly spaced around the hue circle.

    Lightness cycles through a few fixed levels so that neighboring
    categories differ in more than hue.
    """
    colors = []

    for index in range(count):
        hue = category_hue(index, count) / 360.0
        lightness = CATEGORY_LIGHTNESS[index % len(CATEGORY_LIGHTNESS)]
        colors.append(
            _rgb_to_hex(colorsys.hls_to_rgb(hue, lightness, CATEGORY_SATURATION))
        )

    return colors
