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
from collections import namedtuple

from ..classification import style_for_record
from ..filters import apply_filters, as_rule, compile_rules
from .labels import label_for
from .layer import build_layer, update_layer_properties
from .popup import render_popup_html
from .surface import MemorySurface

logger = logging.getLogger(__name__)

LayerStatistics = namedtuple(
    "LayerStatistics",
    ["total_layers", "total_features", "visible_features", "filtered_features"],
)


class LayerManager(object):
    """The layers shown on one rendering surface.

    Parameters
    ----------
    store : RecordStore, optional
        Where records of layers added by table are read from.
    surface : RenderSurface, optional
        The surface features are drawn on. Defaults to a
        :py:class:`~mapgrid.core.layers.surface.MemorySurface`.
    """

    def __init__(self, store=None, surface=None):
        self.store = store
        self.surface = surface if surface is not None else MemorySurface()
        self.rules = []
        self._layers = {}
        self._hidden_fields = {}

    def __contains__(self, layer_id):
        return layer_id in self._layers

    def __len__(self):
        return len(self._layers)

    @property
    def layers(self):
        """list(Layer): The layers in the order they were added."""
        return list(self._layers.values())

    def get_layer(self, layer_id):
        """The layer with the given id.

        Raises
        ------
        KeyError
            If there is no such layer.
        """
        try:
            return self._layers[layer_id]
        except KeyError:
            raise KeyError("No layer with id {!r}".format(layer_id)) from None

    def _list_records(self, config):
        if self.store is None:
            raise ValueError("Layer {} has no records and no store".format(config.id))

        if not config.table_id:
            raise ValueError("Layer {} has no table id".format(config.id))

        return self.store.list_records(config.table_id)

    def add_layer(self, config, records=None, properties=None):
        """Build a layer and draw it.

        Parameters
        ----------
        config : LayerConfig
            The layer configuration.
        records : list(Record), optional
            The records; read from the store table of the layer if omitted.
        properties : LayerProperties, optional
            The styling of the layer.

        Raises
        ------
        NoValidGeometryError
            If no record holds a valid geometry; no layer is added.
        """
        if config.id in self._layers:
            raise ValueError("Layer {!r} already exists".format(config.id))

        if records is None:
            records = self._list_records(config)

        layer = build_layer(records, config, properties=properties)
        self._layers[layer.id] = layer
        self._draw(layer, layer.features)
        return layer

    def remove_layer(self, layer_id):
        """Remove a layer and its features from the surface."""
        layer = self.get_layer(layer_id)

        for feature in layer.features:
            self.surface.discard(feature)

        del self._layers[layer_id]
        self._hidden_fields.pop(layer_id, None)
        return layer

    def set_visibility(self, layer_id, visible):
        """Show or hide a whole layer, honoring the current filters."""
        layer = self.get_layer(layer_id)
        layer.visible = bool(visible)

        if layer.visible:
            apply_filters(layer, self.rules, self.surface)
        else:
            for feature in layer.features:
                self.surface.hide(feature)

    def apply_properties(self, layer_id, properties):
        """Replace the properties of a layer and restyle what changed."""
        layer = self.get_layer(layer_id)
        changed = update_layer_properties(layer, properties)
        self.render(layer, changed)
        return changed

    def set_hidden_fields(self, layer_id, fields):
        """Keep the given fields out of the popups of a layer."""
        layer = self.get_layer(layer_id)
        self._hidden_fields[layer_id] = frozenset(fields)
        self.render(layer, layer.features)

    def refresh(self, layer_id):
        """Re-read the records of a layer from the store and redraw it.

        The properties of the layer are kept. If the fresh records hold no
        valid geometry the current layer stays in place.
        """
        current = self.get_layer(layer_id)
        records = self._list_records(current.config)
        layer = build_layer(records, current.config, properties=current.properties)
        layer.visible = current.visible

        for feature in current.features:
            self.surface.discard(feature)

        self._layers[layer_id] = layer
        self._draw(layer, layer.features)
        return layer

    def replace_features(self, layer, removed, added):
        """Swap features of a layer after one of its records changed."""
        for feature in removed:
            self.surface.discard(feature)

        self._draw(layer, added)

    def zoom_bounds(self, layer_id):
        """The bounds to zoom to for a layer, or ``None``."""
        return self.get_layer(layer_id).bounds

    def apply_filters(self, rules):
        """Filter every layer with a new set of rules.

        Returns
        -------
        int
            The number of visible features over all layers.
        """
        self.rules = [as_rule(rule) for rule in rules]
        return sum(
            apply_filters(layer, self.rules, self.surface)
            for layer in self._layers.values()
        )

    def clear_filters(self):
        return self.apply_filters([])

    def statistics(self, surface=None):
        """Feature counts over all layers.

        Returns
        -------
        LayerStatistics
            ``filtered_features`` counts the features that are not visible.
        """
        surface = surface if surface is not None else self.surface
        total = sum(len(layer.features) for layer in self._layers.values())
        visible = sum(
            surface.visible_count(layer.features) for layer in self._layers.values()
        )
        return LayerStatistics(len(self._layers), total, visible, total - visible)

    def render(self, layer, features):
        """Apply the style, label and popup of a layer to some of its features."""
        properties = layer.properties
        hidden = self._hidden_fields.get(layer.id, ())

        for feature in features:
            self.surface.set_style(
                feature, style_for_record(feature.record, properties.symbology)
            )
            self.surface.set_label(
                feature, label_for(feature, properties.labels), properties.labels
            )
            self.surface.set_popup(
                feature,
                render_popup_html(feature.record, layer, hidden=hidden)
                if properties.popup.enabled
                else None,
            )

    def _draw(self, layer, features):
        self.render(layer, features)

        if not layer.visible:
            return

        expression = compile_rules(self.rules, layer=layer)

        for feature in features:
            if expression.evaluate(feature.record.fields):
                self.surface.show(feature)
            else:
                self.surface.hide(feature)
