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

import unittest
from unittest import mock

from mapgrid.exceptions import ServerError

from ...store import MemoryStore, Record
from .. import (
    Permission,
    PermissionEntry,
    PermissionResolver,
    User,
    default_permission,
    load_permission_entries,
    resolve_permission,
)


def entry(email, field, permission, table="tbl"):
    return PermissionEntry(
        user_email=email, table_id=table, field_id=field, permission=permission
    )


class TestDefaults(unittest.TestCase):
    def test_role_defaults(self):
        for role in ("owner", "admin", "creator", "editor"):
            assert default_permission(role) is Permission.EDIT

        for role in ("commenter", "viewer"):
            assert default_permission(role) is Permission.VIEW

    def test_unknown_role_views(self):
        assert default_permission("intern") is Permission.VIEW
        assert default_permission(None) is Permission.VIEW

    def test_role_case(self):
        assert default_permission("Editor") is Permission.EDIT


class TestResolver(unittest.TestCase):
    def setUp(self):
        self.entries = [
            entry("ann@example.com", "price", "hidden"),
            entry("ann@example.com", "name", "edit"),
            entry("bob@example.com", "name", "view"),
            entry("olga@example.com", "price", "hidden"),
        ]
        self.resolver = PermissionResolver(self.entries)

    def test_explicit_entry_wins_over_role(self):
        resolve = self.resolver.resolve
        assert resolve("ann@example.com", "viewer", "tbl", "name") == "edit"
        assert resolve("bob@example.com", "editor", "tbl", "name") == "view"

    def test_role_default_without_entry(self):
        resolve = self.resolver.resolve
        assert resolve("ann@example.com", "viewer", "tbl", "notes") == "view"
        assert resolve("ann@example.com", "viewer", "other", "price") == "view"

    def test_admin_override(self):
        for role in ("owner", "admin"):
            assert (
                self.resolver.resolve("olga@example.com", role, "tbl", "price")
                is Permission.EDIT
            )

    def test_creator_is_not_an_admin(self):
        assert (
            self.resolver.resolve("olga@example.com", "creator", "tbl", "price")
            is Permission.HIDDEN
        )

    def test_resolve_permission(self):
        owner = User(email="olga@example.com", role="owner")
        permission = resolve_permission(owner, "tbl", "price", self.entries)
        assert permission is Permission.EDIT
        assert resolve_permission(User(email="x@example.com"), "tbl", "price") == "view"

    def test_resolve_table(self):
        ann = User(email="ann@example.com", role="viewer")
        fields = ["name", "price", "notes"]
        permissions = self.resolver.resolve_table(ann, "tbl", fields)

        assert permissions == {"name": "edit", "price": "hidden", "notes": "view"}
        assert self.resolver.visible_fields(ann, "tbl", fields) == ["name", "notes"]
        assert self.resolver.editable_fields(ann, "tbl", ["name", "price"]) == ["name"]
        assert self.resolver.hidden_fields(ann, "tbl", ["name", "price"]) == ["price"]

    def test_resolve_table_is_cached(self):
        ann = User(email="ann@example.com", role="viewer")

        with mock.patch.object(
            self.resolver, "resolve", wraps=self.resolver.resolve
        ) as resolve:
            self.resolver.resolve_table(ann, "tbl", ["name", "price"])
            self.resolver.resolve_table(ann, "tbl", ["name", "price"])
            assert resolve.call_count == 2

            self.resolver.invalidate(ann, "tbl")
            self.resolver.resolve_table(ann, "tbl", ["name"])
            assert resolve.call_count == 3

            self.resolver.invalidate()
            assert len(self.resolver.cache) == 0


class TestLoadEntries(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore(
            {
                "tblPermissions": [
                    Record(
                        "p1",
                        {
                            "user_email": "ann@example.com",
                            "table_id": "tbl",
                            "field_name": "price",
                            "permission_type": "hidden",
                        },
                    ),
                    Record(
                        "p2",
                        {
                            "user_email": "ann@example.com",
                            "table_id": "tbl",
                            "field_id": "tbl_name",
                            "permission_type": "edit",
                        },
                    ),
                    Record(
                        "p3", {"user_email": "ann@example.com", "permission_type": "x"}
                    ),
                ]
            }
        )

    def test_load(self):
        entries = load_permission_entries(self.store, "tblPermissions")

        assert entries == [
            entry("ann@example.com", "price", Permission.HIDDEN),
            entry("ann@example.com", "name", Permission.EDIT),
        ]

    def test_no_permissions_table(self):
        assert load_permission_entries(self.store) == []

    def test_store_failure_falls_back_to_defaults(self):
        store = mock.Mock()
        store.list_records.side_effect = ServerError("boom")

        with self.assertLogs("mapgrid.core.permissions.resolver", "WARNING"):
            assert load_permission_entries(store, "tblPermissions") == []

    def test_from_store(self):
        resolver = PermissionResolver.from_store(self.store, "tblPermissions")
        assert resolver.resolve("ann@example.com", "editor", "tbl", "price") == "hidden"
