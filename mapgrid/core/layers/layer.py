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
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mapgrid.config import get_settings
from mapgrid.exceptions import NoValidGeometryError

from ..common.shapely_support import union_bounds
from ..geometry import Geometry, parse_geometry
from ..store import Record
from .properties import (
    LabelConfig,
    LayerProperties,
    PopupConfig,
    single_symbology,
)

logger = logging.getLogger(__name__)


def _default_color():
    return get_settings().default_color


class LayerConfig(BaseModel):
    """Where a layer's records come from and how it is first shown.

    Parameters
    ----------
    id : str
        Unique identifier of the layer.
    name : str
        Display name of the layer.
    table_id : str, optional
        The backing table of the records.
    geometry_field : str
        The record field holding the WKT geometry.
    color : str
        Color of the initial single symbology. Defaults to the
        ``default_color`` setting.
    visible : bool
        Whether the layer starts out visible.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    table_id: Optional[str] = None
    geometry_field: str = "geometry"
    color: str = Field(default_factory=_default_color)
    visible: bool = True


@dataclass(frozen=True, eq=False)
class Feature(object):
    """A renderable part of the geometry of one record.

    Features compare by identity; a rendering surface tracks them as
    individual map objects.
    """

    layer_id: str
    record_id: str
    part_index: int
    geometry: Geometry
    record: Record

    @property
    def id(self):
        return "{}:{}:{}".format(self.layer_id, self.record_id, self.part_index)

    @property
    def bounds(self):
        return self.geometry.bounds

    @property
    def __geo_interface__(self):
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": self.geometry.__geo_interface__,
            "properties": dict(self.record.fields),
        }

    def __repr__(self):
        return "Feature(id={!r}, type={})".format(self.id, self.geometry.type)


def features_for_record(layer_id, record, geometry_field):
    """Parse the geometry of a record into its features.

    Returns an empty list if the record holds no valid geometry.
    """
    geometry = parse_geometry(record.get(geometry_field))

    if geometry is None:
        return []

    return [
        Feature(layer_id, record.id, index, part, record)
        for index, part in enumerate(geometry.parts())
    ]


def default_properties(config, records):
    """The properties of a newly built layer.

    A single symbology in the layer color, labels disabled and a popup
    showing every non-geometry field of the first record.
    """
    settings = get_settings()
    fields = ()

    if records:
        fields = tuple(
            name for name in records[0].fields if name != config.geometry_field
        )

    return LayerProperties(
        symbology=single_symbology(config.color),
        labels=LabelConfig(),
        popup=PopupConfig(fields=fields, max_width=settings.popup_max_width),
    )


class Layer(object):
    """A set of records and the features built from their geometry.

    Every record stays in :py:attr:`records`, whether or not its geometry
    parsed; only records with valid geometry have features. Lookups are by
    record id.

    Parameters
    ----------
    config : LayerConfig
        The layer configuration.
    records : list(Record)
        The records of the layer.
    properties : LayerProperties
        The styling of the layer.
    """

    def __init__(self, config, records, properties):
        self.config = config
        self.properties = properties
        self.visible = config.visible

        self.records = []
        self.features = []
        self._records_by_id = {}
        self._features_by_record = {}

        for record in records:
            self._insert(record)

        self._reindex()

    @property
    def id(self):
        return self.config.id

    @property
    def name(self):
        return self.config.name

    @property
    def table_id(self):
        return self.config.table_id

    @property
    def geometry_field(self):
        return self.config.geometry_field

    @property
    def bounds(self):
        """tuple or None: ``(min_lng, min_lat, max_lng, max_lat)`` of all features.

        ``None`` if the bounds can't be determined.
        """
        try:
            return union_bounds(feature.bounds for feature in self.features)
        except (ValueError, TypeError) as e:
            logger.warning("Cannot compute bounds of layer %s: %s", self.id, e)
            return None

    def record(self, record_id):
        """The record with the given id, or ``None``."""
        return self._records_by_id.get(record_id)

    def index_of(self, record_id):
        """The position of a record in :py:attr:`records`.

        Raises
        ------
        KeyError
            If the record is not part of this layer.
        """
        return self._index_by_id[record_id]

    def features_for(self, record_id):
        """The features of the record with the given id."""
        return list(self._features_by_record.get(record_id, ()))

    def features_at(self, index):
        """The features of the record at the given position."""
        return self.features_for(self.records[index].id)

    def add_record(self, record):
        """Add a record, returning its new features."""
        if record.id in self._records_by_id:
            raise ValueError(
                "Record {} already exists in layer {}".format(record.id, self.id)
            )

        features = self._insert(record)
        self._reindex()
        return features

    def update_record(self, record_id, fields):
        """Merge field values into a record and rebuild its features.

        Returns
        -------
        tuple(list(Feature), list(Feature))
            The features that were removed and the features that replace them.
        """
        current = self._records_by_id[record_id]
        record = current.copy()
        record.fields.update(fields)

        removed = self._features_by_record.pop(record_id, [])
        added = features_for_record(self.id, record, self.geometry_field)

        self.records[self._index_by_id[record_id]] = record
        self._records_by_id[record_id] = record
        self._features_by_record[record_id] = added
        self._reindex()

        return removed, added

    def remove_record(self, record_id):
        """Remove a record, returning the features destroyed with it."""
        record = self._records_by_id.pop(record_id)
        self.records.remove(record)
        removed = self._features_by_record.pop(record_id, [])
        self._reindex()
        return removed

    def _insert(self, record):
        features = features_for_record(self.id, record, self.geometry_field)

        if not features:
            logger.debug(
                "Record %s of layer %s has no valid geometry in field %r",
                record.id,
                self.id,
                self.geometry_field,
            )

        self.records.append(record)
        self._records_by_id[record.id] = record
        self._features_by_record[record.id] = features
        return features

    def _reindex(self):
        self._index_by_id = {record.id: i for i, record in enumerate(self.records)}
        self.features = [
            feature
            for record in self.records
            for feature in self._features_by_record[record.id]
        ]

    @property
    def __geo_interface__(self):
        return {
            "type": "FeatureCollection",
            "features": [feature.__geo_interface__ for feature in self.features],
        }

    def __repr__(self):
        return "Layer(id={!r}, name={!r}, records={}, features={})".format(
            self.id, self.name, len(self.records), len(self.features)
        )


def build_layer(records, config, properties=None):
    """Build a layer from records holding WKT geometry.

    Parameters
    ----------
    records : list(Record or dict)
        The records; dicts are read with :py:meth:`Record.from_dict`.
    config : LayerConfig
        The layer configuration.
    properties : LayerProperties, optional
        The styling of the layer. Defaults to :py:func:`default_properties`.

    Returns
    -------
    Layer
        The new layer.

    Raises
    ------
    NoValidGeometryError
        If none of the records holds a valid geometry.
    """
    records = [
        record if isinstance(record, Record) else Record.from_dict(record)
        for record in records
    ]

    if properties is None:
        properties = default_properties(config, records)

    layer = Layer(config, records, properties)

    if not layer.features:
        raise NoValidGeometryError(
            "No valid geometry in field {!r} of {} records for layer {}".format(
                config.geometry_field, len(records), config.name
            )
        )

    logger.info(
        "Built layer %s with %d features from %d records (%d without geometry)",
        layer.id,
        len(layer.features),
        len(layer.records),
        sum(1 for record in layer.records if not layer.features_for(record.id)),
    )

    return layer


def update_layer_properties(layer, properties):
    """Replace the properties of a layer as a whole.

    Returns
    -------
    list(Feature)
        The features that must be re-rendered; empty if nothing changed.
    """
    if not isinstance(properties, LayerProperties):
        raise TypeError(
            "properties must be a LayerProperties, not {}".format(
                type(properties).__name__
            )
        )

    if properties == layer.properties:
        return []

    layer.properties = properties
    return list(layer.features)
