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
from collections import OrderedDict, namedtuple

from strenum import StrEnum

from mapgrid.exceptions import (
    FieldValidationError,
    InvalidStateError,
    PermissionDeniedError,
    RemoteFailure,
)

from ..common.values import as_number, as_text
from ..permissions import Permission, PermissionResolver
from ..store import STORE_ERRORS, FieldType
from .fieldtypes import convert_value, detect_field_type, infer_schema

logger = logging.getLogger(__name__)

# Fields the store maintains itself
SYSTEM_FIELDS = frozenset(["id", "created_at", "updated_at"])


class GridState(StrEnum):
    """The edit lifecycle of an :py:class:`AttributeGrid`.

    Attributes
    ----------
    BROWSING : enum
        Nothing is staged; records can be viewed, created and deleted.
    EDITING : enum
        Cell edits are being staged.
    COMMITTING : enum
        Staged edits are being written to the store.
    PARTIALLY_FAILED : enum
        Some staged edits could not be written; they are kept for a retry.
    """

    BROWSING = "browsing"
    EDITING = "editing"
    COMMITTING = "committing"
    PARTIALLY_FAILED = "partially_failed"


PendingEdit = namedtuple(
    "PendingEdit", ["record_id", "field", "new_value", "original_value", "field_type"]
)
"""A staged change of one field of one record."""

CommitFailure = namedtuple("CommitFailure", ["record_id", "fields", "error"])
"""The fields of a record that could not be written, and why."""

CommitResult = namedtuple("CommitResult", ["succeeded", "failed"])
"""The ids of the records a commit wrote and the failures of the others."""


class AttributeGrid(object):
    """A spreadsheet view of the records of a layer with batched editing.

    Edits are validated and converted by field type when they are staged,
    and written by :py:meth:`commit_all` with one update per record. The
    in-memory records and features of the layer only change after the store
    confirms a write.

    Parameters
    ----------
    layer : Layer
        The layer whose records are edited.
    store : RecordStore
        The store holding the records.
    user : User
        The user editing; decides the permission of every field.
    resolver : PermissionResolver, optional
        Resolves field permissions. Defaults to role defaults only.
    schema : list(FieldSchema) or dict, optional
        The field types. Inferred from the records if omitted.
    manager : LayerManager, optional
        Redraws the features of changed records.
    on_record_updated : callable, optional
        Called with each record after it was written.
    """

    def __init__(
        self,
        layer,
        store,
        user,
        resolver=None,
        schema=None,
        manager=None,
        on_record_updated=None,
    ):
        if layer.table_id is None:
            raise ValueError("Layer {} has no table id".format(layer.id))

        self.layer = layer
        self.store = store
        self.user = user
        self.resolver = resolver if resolver is not None else PermissionResolver()
        self.manager = manager
        self.on_record_updated = on_record_updated

        if schema is None:
            schema = infer_schema(layer.records)
        elif not isinstance(schema, dict):
            schema = {field.name: field for field in schema}
        self.schema = dict(schema)

        self._state = GridState.BROWSING
        self._pending = OrderedDict()
        self._failed = set()

        self._resolve_fields()

    @property
    def table_id(self):
        return self.layer.table_id

    @property
    def state(self):
        """GridState: The current state of the edit lifecycle."""
        return self._state

    @property
    def pending(self):
        """dict: The staged edits by ``(record_id, field)``."""
        return dict(self._pending)

    @property
    def failed_cells(self):
        """set: The ``(record_id, field)`` cells whose last commit failed."""
        return set(self._failed)

    def _resolve_fields(self):
        fields = list(self.schema)
        for record in self.layer.records:
            for name in record.fields:
                if name not in fields:
                    fields.append(name)

        self.fields = fields
        self.permissions = self.resolver.resolve_table(self.user, self.table_id, fields)
        self.columns = self.resolver.visible_fields(self.user, self.table_id, fields)
        self.editable_fields = self.resolver.editable_fields(
            self.user, self.table_id, fields
        )

        if self.manager is not None:
            self.manager.set_hidden_fields(
                self.layer.id,
                self.resolver.hidden_fields(self.user, self.table_id, fields),
            )

    def refresh_permissions(self):
        """Re-resolve field permissions, dropping the cached ones."""
        self.resolver.invalidate(self.user, self.table_id)
        self._resolve_fields()

    @property
    def can_edit(self):
        """bool: Whether the user may change at least one field."""
        return bool(self.editable_fields)

    def _require_edit(self, action):
        if not self.can_edit:
            logger.warning(
                "%s refused: %s may not edit table %s",
                action,
                self.user.email,
                self.table_id,
            )
            raise PermissionDeniedError(
                "{} may not edit any field of table {}".format(
                    self.user.email, self.table_id
                )
            )

    def permission_for(self, field):
        """The permission of the user on a field, including fields no record has yet."""
        permission = self.permissions.get(field)
        if permission is None:
            permission = self.resolver.resolve(
                self.user.email, self.user.role, self.table_id, field
            )

        return permission

    def field_type(self, field, raw_value=None):
        """The type a value for a field converts to."""
        schema = self.schema.get(field)
        if schema is not None:
            return schema.field_type

        return detect_field_type(raw_value) or FieldType.TEXT

    # Lifecycle

    def enter_editing(self):
        """Start staging edits.

        Raises
        ------
        PermissionDeniedError
            If the user may not edit any field; the grid keeps browsing.
        InvalidStateError
            While a commit is running.
        """
        if self._state is GridState.COMMITTING:
            raise InvalidStateError("Cannot start editing while committing")

        self._require_edit("Editing")
        self._state = GridState.EDITING

    def _convert(self, record_id, field, raw_value):
        field_type = self.field_type(field, raw_value)

        try:
            return convert_value(raw_value, field_type), field_type
        except ValueError as e:
            logger.warning(
                "Rejected %s value %r for field %s of record %s: %s",
                field_type,
                raw_value,
                field,
                record_id,
                e,
            )
            raise FieldValidationError(
                record_id, field, raw_value, field_type, reason=str(e)
            ) from e

    def _check_stage(self, record_ids, field):
        if self._state is not GridState.EDITING:
            raise InvalidStateError(
                "Edits can only be staged while editing, not while {}".format(
                    self._state
                )
            )

        if self.permission_for(field) is not Permission.EDIT:
            logger.warning(
                "Edit refused: %s may not edit field %s of table %s",
                self.user.email,
                field,
                self.table_id,
            )
            raise PermissionDeniedError(
                "{} may not edit field '{}' of table {}".format(
                    self.user.email, field, self.table_id
                )
            )

        for record_id in record_ids:
            if self.layer.record(record_id) is None:
                raise KeyError("No record with id {!r}".format(record_id))

    def _store_edit(self, record_id, field, value, field_type):
        key = (record_id, field)
        previous = self._pending.pop(key, None)
        self._failed.discard(key)

        if previous is not None:
            original = previous.original_value
        else:
            original = self.layer.record(record_id).get(field)

        if value == original:
            return None

        edit = PendingEdit(record_id, field, value, original, field_type)
        self._pending[key] = edit
        return edit

    def stage_edit(self, record_id, field, raw_value):
        """Validate, convert and stage a change of one cell.

        A later edit of the same cell replaces an earlier one; an edit back
        to the original value unstages the cell.

        Returns
        -------
        PendingEdit or None
            The staged edit, ``None`` if the cell is unchanged.

        Raises
        ------
        FieldValidationError
            If the value does not convert to the field type; nothing is staged.
        PermissionDeniedError
            If the user may not edit the field.
        InvalidStateError
            If the grid is not editing.
        """
        self._check_stage([record_id], field)
        value, field_type = self._convert(record_id, field, raw_value)
        return self._store_edit(record_id, field, value, field_type)

    def stage_batch(self, record_ids, field, raw_value):
        """Stage the same value for a field of several records.

        Every conversion is validated before anything is staged.

        Returns
        -------
        list(PendingEdit)
            The staged edits, leaving out unchanged cells.
        """
        record_ids = list(record_ids)
        self._check_stage(record_ids, field)

        converted = [
            (record_id,) + self._convert(record_id, field, raw_value)
            for record_id in record_ids
        ]

        edits = []
        for record_id, value, field_type in converted:
            edit = self._store_edit(record_id, field, value, field_type)
            if edit is not None:
                edits.append(edit)

        return edits

    def commit_all(self):
        """Write all staged edits, one update per record, in staging order.

        Records that were written leave the pending edits and update the
        layer. Records that failed keep their pending edits and mark their
        cells as failed; the grid is then :py:attr:`GridState.PARTIALLY_FAILED`
        and calling :py:meth:`commit_all` again retries them,
        while :py:meth:`enter_editing` allows further edits first.

        Returns
        -------
        CommitResult
            The ids of the written records and the failures.
        """
        if self._state is GridState.COMMITTING:
            raise InvalidStateError("A commit is already running")

        if not self._pending:
            if self._state is not GridState.BROWSING:
                self._state = GridState.BROWSING
            return CommitResult([], [])

        if self._state not in (GridState.EDITING, GridState.PARTIALLY_FAILED):
            raise InvalidStateError("Cannot commit while {}".format(self._state))

        batches = OrderedDict()
        for (record_id, field), edit in self._pending.items():
            batches.setdefault(record_id, OrderedDict())[field] = edit.new_value

        self._state = GridState.COMMITTING
        succeeded = []
        failed = []

        try:
            for record_id, fields in batches.items():
                try:
                    self.store.update_record(self.table_id, record_id, dict(fields))
                except STORE_ERRORS as e:
                    logger.warning("Failed to update record %s: %s", record_id, e)
                    error = RemoteFailure(
                        "Failed to update record {}: {}".format(record_id, e),
                        record_id=record_id,
                    )
                    error.__cause__ = e
                    failed.append(CommitFailure(record_id, dict(fields), error))
                    self._failed.update((record_id, field) for field in fields)
                    continue

                for field in fields:
                    self._pending.pop((record_id, field), None)
                    self._failed.discard((record_id, field))

                self._apply(record_id, fields)
                succeeded.append(record_id)
        finally:
            self._state = (
                GridState.PARTIALLY_FAILED if self._pending else GridState.BROWSING
            )

        logger.info(
            "Committed %d records of table %s, %d failed",
            len(succeeded),
            self.table_id,
            len(failed),
        )

        return CommitResult(succeeded, failed)

    def cancel_editing(self):
        """Discard all staged edits and return to browsing."""
        if self._state is GridState.COMMITTING:
            raise InvalidStateError("Cannot cancel while committing")

        self._pending.clear()
        self._failed.clear()
        self._state = GridState.BROWSING

    def _apply(self, record_id, fields):
        removed, added = self.layer.update_record(record_id, fields)

        if self.manager is not None:
            self.manager.replace_features(self.layer, removed, added)

        if self.on_record_updated is not None:
            self.on_record_updated(self.layer.record(record_id))

    # Records

    def _convert_fields(self, fields):
        converted = {}
        for field, raw_value in fields.items():
            converted[field] = self._convert(None, field, raw_value)[0]
        return converted

    def create_record(self, fields):
        """Create a record in the store and add it to the layer.

        Raises
        ------
        PermissionDeniedError
            If the user may not edit any field.
        FieldValidationError
            If a value does not convert to its field type.
        RemoteFailure
            If the store rejects the record; the layer is unchanged.
        """
        self._require_edit("Create")
        fields = self._convert_fields(fields)

        try:
            record = self.store.create_record(self.table_id, fields)
        except STORE_ERRORS as e:
            logger.warning("Failed to create record in table %s: %s", self.table_id, e)
            raise RemoteFailure(
                "Failed to create record in table {}: {}".format(self.table_id, e)
            ) from e

        added = self.layer.add_record(record)
        if self.manager is not None:
            self.manager.replace_features(self.layer, [], added)

        return record

    def duplicate_record(self, record_id):
        """Create a copy of a record, without the fields the store maintains."""
        source = self.layer.record(record_id)
        if source is None:
            raise KeyError("No record with id {!r}".format(record_id))

        fields = {
            name: value
            for name, value in source.fields.items()
            if name not in SYSTEM_FIELDS
        }
        return self.create_record(fields)

    def delete_record(self, record_id):
        """Delete a record from the store, then from the layer.

        Raises
        ------
        PermissionDeniedError
            If the user may not edit any field.
        RemoteFailure
            If the store rejects the deletion; the layer is unchanged.
        """
        self._require_edit("Delete")

        if self.layer.record(record_id) is None:
            raise KeyError("No record with id {!r}".format(record_id))

        try:
            self.store.delete_record(self.table_id, record_id)
        except STORE_ERRORS as e:
            logger.warning("Failed to delete record %s: %s", record_id, e)
            raise RemoteFailure(
                "Failed to delete record {}: {}".format(record_id, e),
                record_id=record_id,
            ) from e

        removed = self.layer.remove_record(record_id)
        if self.manager is not None:
            self.manager.replace_features(self.layer, removed, [])

        for key in [key for key in self._pending if key[0] == record_id]:
            del self._pending[key]
        self._failed = {key for key in self._failed if key[0] != record_id}

        if self._state is GridState.PARTIALLY_FAILED and not self._pending:
            self._state = GridState.BROWSING

    # View

    def rows(self):
        """The records as rows of visible columns, with staged values applied.

        Returns
        -------
        list(dict)
            One dict per record with its ``id`` and its visible fields.
        """
        rows = []

        for record in self.layer.records:
            row = {"id": record.id}
            for field in self.columns:
                edit = self._pending.get((record.id, field))
                row[field] = edit.new_value if edit is not None else record.get(field)
            rows.append(row)

        return rows

    def search(self, text):
        """The rows with a visible value containing ``text``, ignoring case."""
        needle = as_text(text).strip().lower()
        if not needle:
            return self.rows()

        return [
            row
            for row in self.rows()
            if any(needle in as_text(row[field]).lower() for field in self.columns)
        ]

    def sort(self, field, descending=False):
        """The rows ordered by a field; empty values always come last.

        Numbers sort numerically, anything else as case-insensitive text.
        """
        rows = self.rows()
        empty = [row for row in rows if as_text(row.get(field)).strip() == ""]
        filled = [row for row in rows if as_text(row.get(field)).strip() != ""]

        def key(row):
            value = row.get(field)
            number = as_number(value)
            if number is not None:
                return (0, number, "")
            return (1, 0, as_text(value).lower())

        filled.sort(key=key, reverse=descending)
        return filled + empty


__all__ = [
    "AttributeGrid",
    "CommitFailure",
    "CommitResult",
    "GridState",
    "PendingEdit",
]
