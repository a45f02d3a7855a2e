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

import requests

from mapgrid.exceptions import ClientError, ServerError

#: Exceptions that signal a rejected store call.
STORE_ERRORS = (ClientError, ServerError, requests.exceptions.RequestException)


class RecordStore(abc.ABC):
    """The tabular record store the map engine reads from and writes to.

    Implementations raise one of :py:data:`STORE_ERRORS` when a call is
    rejected. They never retry on their own.
    """

    @abc.abstractmethod
    def list_records(self, table_id, limit=None, offset=None, filter=None, sort=None):
        """List the records of a table.

        Parameters
        ----------
        table_id : str
            The table to list.
        limit : int, optional
            Maximum number of records to return. All records when omitted.
        offset : int, optional
            Number of records to skip.
        filter : dict, optional
            A store-side filter.
        sort : str or list, optional
            A store-side sort order.

        Returns
        -------
        list(Record)
        """

    @abc.abstractmethod
    def create_record(self, table_id, fields):
        """Create a record with the given field values and return it."""

    @abc.abstractmethod
    def update_record(self, table_id, record_id, fields):
        """Set the given field values of a record and return the whole record."""

    @abc.abstractmethod
    def delete_record(self, table_id, record_id):
        """Delete a record."""

    @abc.abstractmethod
    def list_fields(self, table_id):
        """List the fields of a table as :py:class:`FieldSchema` instances."""
