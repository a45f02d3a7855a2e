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

"""Per-field edit permissions of users on tables.

A permission is resolved from, in order of precedence:

1. the administrator override: ``owner`` and ``admin`` may edit every field,
   whatever explicit entries say;
2. an explicit :py:class:`PermissionEntry` for the user, table and field;
3. the default of the user's role; unknown roles may view.
"""

import logging
from typing import Optional

from cachetools import LRUCache
from cachetools.keys import hashkey
from pydantic import BaseModel, ConfigDict
from strenum import StrEnum

from mapgrid.config import get_settings

from ..store import STORE_ERRORS

logger = logging.getLogger(__name__)


class Permission(StrEnum):
    """What a user may do with a field.

    Attributes
    ----------
    VIEW : enum
        The field is shown but can't be changed.
    EDIT : enum
        The field is shown and can be changed.
    HIDDEN : enum
        The field is not shown at all.
    """

    VIEW = "view"
    EDIT = "edit"
    HIDDEN = "hidden"


class Role(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    CREATOR = "creator"
    EDITOR = "editor"
    COMMENTER = "commenter"
    VIEWER = "viewer"


ADMIN_ROLES = frozenset([Role.OWNER, Role.ADMIN])

ROLE_DEFAULTS = {
    Role.OWNER: Permission.EDIT,
    Role.ADMIN: Permission.EDIT,
    Role.CREATOR: Permission.EDIT,
    Role.EDITOR: Permission.EDIT,
    Role.COMMENTER: Permission.VIEW,
    Role.VIEWER: Permission.VIEW,
}


def _role(role):
    try:
        return Role(str(role).lower())
    except ValueError:
        return None


def default_permission(role):
    """The permission a role has on fields without an explicit entry."""
    return ROLE_DEFAULTS.get(_role(role), Permission.VIEW)


def is_admin(role):
    return _role(role) in ADMIN_ROLES


class User(BaseModel):
    """The identity permissions are resolved for."""

    model_config = ConfigDict(frozen=True)

    email: str
    role: str = Role.VIEWER


class PermissionEntry(BaseModel):
    """An explicit permission of one user on one field of a table."""

    model_config = ConfigDict(frozen=True)

    user_email: str
    table_id: str
    field_id: str
    permission: Permission

    @classmethod
    def from_record(cls, record):
        """Read an entry from a record of the permissions table.

        Returns ``None`` for records that don't describe a valid entry.
        """
        fields = record.fields
        table_id = fields.get("table_id")
        field_id = fields.get("field_name")

        if not field_id:
            # Stored field ids are prefixed with the table id
            field_id = fields.get("field_id") or ""
            prefix = "{}_".format(table_id)
            if field_id.startswith(prefix):
                field_id = field_id[len(prefix) :]

        try:
            return cls(
                user_email=fields.get("user_email"),
                table_id=table_id,
                field_id=field_id,
                permission=fields.get("permission_type"),
            )
        except ValueError as e:
            logger.debug("Ignoring permission record %s: %s", record.id, e)
            return None


def load_permission_entries(store, permissions_table=None):
    """Read the explicit permission entries from the permissions table.

    Parameters
    ----------
    store : RecordStore
        The store holding the permissions table.
    permissions_table : str, optional
        The table id. Defaults to the ``permissions_table`` setting; if that
        is empty there are no explicit entries.

    Returns
    -------
    list(PermissionEntry)
        The entries. A store failure yields no entries, so that role
        defaults apply.
    """
    if permissions_table is None:
        permissions_table = get_settings().permissions_table

    if not permissions_table:
        return []

    try:
        records = store.list_records(permissions_table)
    except STORE_ERRORS as e:
        logger.warning(
            "Cannot load permissions from table %s, using role defaults: %s",
            permissions_table,
            e,
        )
        return []

    entries = [PermissionEntry.from_record(record) for record in records]
    return [entry for entry in entries if entry is not None]


class PermissionResolver(object):
    """Resolves field permissions from explicit entries and role defaults.

    Resolved per-table maps are cached per user and table until
    :py:meth:`invalidate` is called.

    Parameters
    ----------
    entries : iterable(PermissionEntry), optional
        The explicit permission entries.
    maxsize : int, optional
        The number of per-table maps to keep cached.
    """

    def __init__(self, entries=(), maxsize=128):
        self._entries = {
            (entry.user_email, entry.table_id, entry.field_id): entry.permission
            for entry in entries
        }
        self.cache = LRUCache(maxsize)

    @classmethod
    def from_store(cls, store, permissions_table=None, **kwargs):
        """A resolver using the entries of the permissions table in a store."""
        return cls(load_permission_entries(store, permissions_table), **kwargs)

    def resolve(self, user_email, role, table_id, field_id):
        """The permission of a user with a role on one field.

        Returns
        -------
        Permission
        """
        if is_admin(role):
            return Permission.EDIT

        permission = self._entries.get((user_email, table_id, field_id))
        if permission is not None:
            return permission

        return default_permission(role)

    def resolve_table(self, user, table_id, field_ids):
        """The permission of a user on each field of a table.

        Returns
        -------
        dict
            Field id to :py:class:`Permission`, cached per user and table.
        """
        key = hashkey(user.email, user.role, table_id)
        permissions = self.cache.get(key)

        if permissions is None:
            permissions = {}
            self.cache[key] = permissions

        missing = [field_id for field_id in field_ids if field_id not in permissions]
        for field_id in missing:
            permissions[field_id] = self.resolve(
                user.email, user.role, table_id, field_id
            )

        return {field_id: permissions[field_id] for field_id in field_ids}

    def invalidate(self, user=None, table_id=None):
        """Drop cached maps of a user and table, or all of them."""
        if user is None or table_id is None:
            self.cache.clear()
        else:
            self.cache.pop(hashkey(user.email, user.role, table_id), None)

    def visible_fields(self, user, table_id, field_ids):
        """The fields a user may see, in order."""
        permissions = self.resolve_table(user, table_id, field_ids)
        return [f for f in field_ids if permissions[f] is not Permission.HIDDEN]

    def editable_fields(self, user, table_id, field_ids):
        """The fields a user may change, in order."""
        permissions = self.resolve_table(user, table_id, field_ids)
        return [f for f in field_ids if permissions[f] is Permission.EDIT]

    def hidden_fields(self, user, table_id, field_ids):
        permissions = self.resolve_table(user, table_id, field_ids)
        return [f for f in field_ids if permissions[f] is Permission.HIDDEN]


def resolve_permission(user, table_id, field_id, entries=()):
    """The permission of a user on one field of a table.

    Parameters
    ----------
    user : User
        The user; the role decides the default and the administrator override.
    table_id : str
        The table.
    field_id : str
        The field.
    entries : iterable(PermissionEntry), optional
        Explicit permission entries.

    Returns
    -------
    Permission
    """
    resolver = PermissionResolver(entries)
    return resolver.resolve(user.email, user.role, table_id, field_id)
