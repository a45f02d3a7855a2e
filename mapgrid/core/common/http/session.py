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

import json
import logging
import uuid
from http import HTTPStatus

import requests
import requests.adapters

from mapgrid.exceptions import (
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    GatewayTimeoutError,
    GoneError,
    MethodNotAllowedError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)

# Retry and pool warnings from urllib3 are noise for store calls
logging.getLogger("urllib3").setLevel(logging.ERROR)
logging.getLogger("urllib3").propagate = False


class HttpHeaderKeys:
    Authorization = "Authorization"
    ContentType = "Content-Type"
    RequestGroup = "X-Request-Group"
    RetryAfter = "Retry-After"


class HttpHeaderValues:
    ApplicationJson = "application/json"


_STATUS_ERRORS = {
    HTTPStatus.BAD_REQUEST: BadRequestError,
    HTTPStatus.UNAUTHORIZED: UnauthorizedError,
    HTTPStatus.FORBIDDEN: ForbiddenError,
    HTTPStatus.NOT_FOUND: NotFoundError,
    HTTPStatus.METHOD_NOT_ALLOWED: MethodNotAllowedError,
    HTTPStatus.CONFLICT: ConflictError,
    HTTPStatus.GONE: GoneError,
    HTTPStatus.UNPROCESSABLE_ENTITY: ValidationError,
}


class Session(requests.Session):
    """A :py:class:`requests.Session` bound to the backing store.

    Paths handed to :py:meth:`request` are relative to `base_url`, and every
    response status outside of 2xx/3xx is raised as one of the exceptions of
    :py:mod:`mapgrid.exceptions`. A session is not thread safe; see
    :py:class:`~mapgrid.core.common.http.service.Service` for per-thread
    sessions.

    Parameters
    ----------
    base_url: str
        The URL prefix of the backing store.
    timeout: float or tuple(float, float), optional
        Default timeout for every request.
    retries: int or urllib3.util.retry.Retry, optional
        Retry policy of the transport adapters. Store calls are not retried
        unless asked for.
    """

    ATTR_BASE_URL = "base_url"
    ATTR_TIMEOUT = "timeout"

    # Adapts the custom pickling protocol of requests.Session
    __attrs__ = requests.Session.__attrs__ + [ATTR_BASE_URL, ATTR_TIMEOUT]

    def __init__(self, base_url="", timeout=None, retries=0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        super(Session, self).__init__()

        for prefix in ("http://", "https://"):
            self.mount(prefix, requests.adapters.HTTPAdapter(max_retries=retries))

    def request(self, method, url, headers=None, **kwargs):
        """Send a request to the store.

        Parameters
        ----------
        method: str
            The HTTP method to use.
        url: str
            The path of the resource, relative to `base_url`.
        headers: dict, optional
            Extra headers for this request.
        kwargs: dict
            Passed on to :py:meth:`requests.Session.request`.

        Returns
        -------
        requests.Response

        Raises
        ------
        ClientError
            For any 4xx status, as the matching subclass where one exists
            (`BadRequestError`, `NotFoundError`, `ConflictError`,
            `RateLimitError` with its ``retry_after``, ...).
        ServerError
            For any 5xx status, with the status in ``original_status``.
        """
        if self.timeout and self.ATTR_TIMEOUT not in kwargs:
            kwargs[self.ATTR_TIMEOUT] = self.timeout

        headers = dict(headers or {})
        headers[HttpHeaderKeys.RequestGroup] = uuid.uuid4().hex

        resp = super(Session, self).request(
            method, self.base_url + url, headers=headers, **kwargs
        )

        if HTTPStatus.OK <= resp.status_code < HTTPStatus.BAD_REQUEST:
            return resp

        raise self._error_for(resp, method, url)

    @classmethod
    def _error_for(cls, resp, method, url):
        status = resp.status_code
        text = cls._error_message(resp)

        if status in _STATUS_ERRORS:
            if status == HTTPStatus.NOT_FOUND and not text:
                text = "{} {} {}".format(status, method, url)
            return _STATUS_ERRORS[status](text)

        if status == HTTPStatus.TOO_MANY_REQUESTS:
            return RateLimitError(
                text, retry_after=resp.headers.get(HttpHeaderKeys.RetryAfter)
            )

        if status < HTTPStatus.INTERNAL_SERVER_ERROR:
            error = ClientError(text)
            error.status = status
            return error

        if status == HTTPStatus.GATEWAY_TIMEOUT:
            error = GatewayTimeoutError(
                text or "The store timed out, consider requesting fewer records."
            )
        else:
            error = ServerError(text)

        error.original_status = status
        return error

    @staticmethod
    def _error_message(resp):
        # The store reports errors as {"message": ...} or {"detail": ...}
        try:
            body = resp.json()
        except (ValueError, json.JSONDecodeError):
            return resp.text

        if isinstance(body, dict):
            for key in ("message", "detail"):
                if body.get(key):
                    return str(body[key])

        return resp.text
