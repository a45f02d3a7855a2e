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

import threading

from mapgrid.config import get_settings

from .session import HttpHeaderKeys, HttpHeaderValues, Session


class DefaultClientMixin:
    """Gives a client class a lazily created, process-wide default instance.

    Each class in a hierarchy has its own default; a class is instantiated
    without arguments the first time its default is asked for.
    """

    _default_clients = {}
    _default_clients_lock = threading.Lock()

    @classmethod
    def get_default_client(cls):
        """The default instance of this class, created on first use."""
        with cls._default_clients_lock:
            client = DefaultClientMixin._default_clients.get(cls)

            if client is None:
                client = DefaultClientMixin._default_clients[cls] = cls()

        return client

    @classmethod
    def set_default_client(cls, client):
        """Make `client` the default instance of this class.

        Raises
        ------
        ValueError
            If `client` is not an instance of this class.
        """
        if not isinstance(client, cls):
            raise ValueError(f"client must be an instance of {cls.__name__}")

        with cls._default_clients_lock:
            DefaultClientMixin._default_clients[cls] = client

    @classmethod
    def clear_all_default_clients(cls):
        """Forget the default instances of this class and of all its subclasses."""
        with cls._default_clients_lock:
            for klass in list(DefaultClientMixin._default_clients):
                if issubclass(klass, cls):
                    del DefaultClientMixin._default_clients[klass]


class Service(object):
    """Base of the HTTP clients of the backing store.

    Every thread gets its own :py:class:`Session`, built on first use, since
    a session's connection pool can't be shared between threads.

    Parameters
    ----------
    url: str, optional
        The URL prefix of the backing store. Defaults to the ``store_url``
        setting.
    token: str, optional
        Bearer token sent with every request.
    timeout: float, optional
        Request timeout in seconds. Defaults to the ``store_timeout`` setting.
    session_class: class, optional
        A subclass of :py:class:`Session` to build the sessions from.

    Raises
    ------
    TypeError
        If `session_class` is not a subclass of :py:class:`Session`.
    """

    _session_class = Session

    def __init__(self, url=None, token=None, timeout=None, session_class=None):
        settings = get_settings()

        if session_class is not None:
            if not issubclass(session_class, Session):
                raise TypeError(
                    "The session class must be a subclass of {}.".format(Session)
                )
            self._session_class = session_class

        self.base_url = settings.store_url if url is None else url
        self.timeout = settings.store_timeout if timeout is None else timeout
        self.token = token
        self._local = threading.local()

    @property
    def session(self):
        """Session: The session of the calling thread."""
        session = getattr(self._local, "session", None)

        if session is None:
            session = self._local.session = self._build_session()

        if self.token:
            session.headers[HttpHeaderKeys.Authorization] = "Bearer {}".format(
                self.token
            )

        return session

    def _build_session(self):
        session = self._session_class(self.base_url, timeout=self.timeout)
        session.headers[HttpHeaderKeys.ContentType] = HttpHeaderValues.ApplicationJson
        return session

    def __getstate__(self):
        # Sessions are per thread and rebuilt after unpickling
        return {k: v for k, v in self.__dict__.items() if k != "_local"}

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._local = threading.local()
