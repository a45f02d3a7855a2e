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

import abc


class RenderSurface(abc.ABC):
    """The map a layer's features are drawn on.

    Features are shown or hidden individually; the surface owns the map
    objects, the layer keeps owning the features.
    """

    @abc.abstractmethod
    def show(self, feature):
        """Add a feature to the map, if not already shown."""

    @abc.abstractmethod
    def hide(self, feature):
        """Remove a feature from the map, keeping its style, label and popup."""

    @abc.abstractmethod
    def is_visible(self, feature):
        """Whether the feature is currently on the map."""

    @abc.abstractmethod
    def set_style(self, feature, style):
        """Apply a :py:class:`~mapgrid.core.layers.properties.Style`."""

    @abc.abstractmethod
    def set_label(self, feature, text, labels):
        """Set or clear (``text=None``) the permanent label of a feature."""

    @abc.abstractmethod
    def set_popup(self, feature, html):
        """Set or clear (``html=None``) the popup content of a feature."""

    def discard(self, feature):
        """Forget a feature that was destroyed."""
        self.hide(feature)

    def visible_count(self, features):
        return sum(1 for feature in features if self.is_visible(feature))


class MemorySurface(RenderSurface):
    """A surface that only records what would be drawn.

    Useful without a map widget, and to inspect rendering in tests.
    """

    def __init__(self):
        self._visible = set()
        self.styles = {}
        self.labels = {}
        self.popups = {}

    def show(self, feature):
        self._visible.add(feature)

    def hide(self, feature):
        self._visible.discard(feature)

    def is_visible(self, feature):
        return feature in self._visible

    def set_style(self, feature, style):
        self.styles[feature] = style

    def set_label(self, feature, text, labels):
        if text is None:
            self.labels.pop(feature, None)
        else:
            self.labels[feature] = text

    def set_popup(self, feature, html):
        if html is None:
            self.popups.pop(feature, None)
        else:
            self.popups[feature] = html

    def discard(self, feature):
        self.hide(feature)
        self.styles.pop(feature, None)
        self.labels.pop(feature, None)
        self.popups.pop(feature, None)

    @property
    def visible_features(self):
        return set(self._visible)
