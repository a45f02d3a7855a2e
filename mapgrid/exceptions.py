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


"""Exceptions raised by the backing-store client and the map engine."""


class ConfigError(Exception):
    """The configuration could not be selected or loaded."""

    pass


class ClientError(Exception):
    """The backing store rejected a request as invalid (a 4xx status)."""

    pass


class BadRequestError(ClientError):
    """The store could not make sense of the request."""

    status = 400


class UnauthorizedError(ClientError):
    """The store token is missing or invalid."""

    status = 401


class ForbiddenError(ClientError):
    """The store token does not grant access to the table or record."""

    status = 403


class NotFoundError(ClientError):
    """No such table or record."""

    status = 404


class MethodNotAllowedError(ClientError):
    """The store does not support this operation on the resource."""

    status = 405


class ConflictError(ClientError):
    """The change conflicts with the current state of the record."""

    status = 409


class GoneError(ClientError):
    """The table or record has been removed for good."""

    status = 410


class ValidationError(BadRequestError):
    """The store refused one or more field values."""

    status = 422


class RateLimitError(ClientError):
    """Too many requests were sent to the store.

    Attributes
    ----------
    retry_after : str or None
        The ``Retry-After`` header of the response, if any.
    """

    status = 429

    def __init__(self, message, retry_after=None):
        super(RateLimitError, self).__init__(message)
        self.retry_after = retry_after


class ServerError(Exception):
    """The store failed to handle a request (a 5xx status)."""

    status = 500


class GatewayTimeoutError(ServerError):
    """The store did not answer in time."""

    status = 504


class MapGridError(Exception):
    """Base class for map engine errors."""

    pass


class GeometryParseError(MapGridError):
    """Geometry text could not be turned into a geometry primitive."""

    def __init__(self, wkt):
        super(GeometryParseError, self).__init__(
            "Could not parse geometry: {!r}".format(
                wkt[:100] if isinstance(wkt, str) else wkt
            )
        )
        self.wkt = wkt


class NoValidGeometryError(MapGridError):
    """None of the records of a layer holds a usable geometry."""

    pass


class ClassificationError(MapGridError):
    """A field cannot be classified (no usable values or a degenerate range)."""

    pass


class PermissionDeniedError(MapGridError):
    """The current user may not perform the requested change."""

    pass


class FieldValidationError(MapGridError):
    """A staged value could not be converted to the type of its field.

    Attributes
    ----------
    record_id : str
        The record the value was staged for.
    field : str
        The field name.
    raw_value : object
        The value as typed by the user.
    field_type : str
        The field type the value failed to convert to.
    """

    def __init__(self, record_id, field, raw_value, field_type, reason=None):
        message = "Invalid {} value for field '{}' of record {}: {!r}".format(
            field_type, field, record_id, raw_value
        )
        if reason:
            message += " ({})".format(reason)

        super(FieldValidationError, self).__init__(message)
        self.record_id = record_id
        self.field = field
        self.raw_value = raw_value
        self.field_type = field_type


class RemoteFailure(MapGridError):
    """A backing-store call was rejected.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, message, record_id=None):
        super(RemoteFailure, self).__init__(message)
        self.record_id = record_id


class InvalidStateError(MapGridError):
    """A grid operation was requested in a state that does not allow it."""

    pass
