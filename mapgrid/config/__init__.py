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

"""Configuration of the map engine.

Settings come from the packaged ``settings.toml``, which holds one section per
named environment on top of ``[default]``. The environment is chosen with
:py:func:`select_env` or the ``MAPGRID_ENV`` environment variable; any
``MAPGRID_<KEY>`` variable overrides the key of the same name.
"""

import os
from threading import Lock

import dynaconf

from mapgrid.exceptions import ConfigError

DEFAULT_ENVIRONMENT = "production"  #: Used when no environment is selected
TESTING_ENVIRONMENT = "testing"  #: Environment used by the test suite
ENVVAR_PREFIX = "MAPGRID"  #: Prefix of the overriding environment variables

_BUILTIN_SETTINGS = os.path.join(os.path.dirname(__file__), "settings.toml")


def _restore_environ(name, value):
    if value is None:
        os.environ.pop(name, None)
    else:
        os.environ[name] = value


class Settings(dynaconf.Dynaconf):
    """The engine settings, a ``dynaconf.Dynaconf`` instance.

    Only one environment can be selected per process. It is selected
    implicitly by the first :py:func:`get_settings` call, or explicitly
    beforehand:

    .. code-block::

        from mapgrid.config import select_env
        select_env("testing")

    See https://www.dynaconf.com/ for everything else ``Dynaconf`` offers.
    """

    # The process-wide instance, set once by select_env or get_settings
    _settings = None
    _lock = Lock()

    @property
    def env(self):
        """str : The name of the environment these settings were loaded for."""
        return self.env_for_dynaconf

    @classmethod
    def select_env(cls, env=None, settings_file=None, envvar_prefix=ENVVAR_PREFIX):
        """Select the environment of the process and load its settings.

        Parameters
        ----------
        env : str, optional
            A section of the packaged ``settings.toml``. Defaults to the
            ``<envvar_prefix>_ENV`` environment variable, then to
            ``production``.
        settings_file : str, optional
            A TOML file whose settings override the packaged ones.
            Environment variables still override both.
        envvar_prefix : str, optional
            Prefix of the environment variables consulted for overrides.

        Returns
        -------
        Settings

        Raises
        ------
        ConfigError
            If the environment doesn't exist, the settings can't be loaded,
            or a different environment was selected before.
        """
        with cls._lock:
            if cls._settings is None:
                cls._settings = cls._load(env, settings_file, envvar_prefix)

            settings = cls._settings

        if env is not None and env != settings.current_env:
            raise ConfigError(
                f"Configuration '{settings.current_env}' has already been selected"
            )

        return settings

    @classmethod
    def get_settings(cls):
        """The settings of the process, selecting the default environment if
        none was selected yet.

        Raises
        ------
        ConfigError
            If no configuration could be established.
        """
        settings = cls._settings

        if settings is None:
            settings = cls.select_env()

        return settings

    @classmethod
    def peek_settings(cls, env=None, settings_file=None, envvar_prefix=ENVVAR_PREFIX):
        """Load the settings of an environment without selecting it.

        Takes the same parameters and raises the same errors as
        :py:meth:`select_env`, but leaves the process configuration and
        ``os.environ`` as they were.
        """
        selector = f"{envvar_prefix}_ENV"
        original = os.environ.get(selector)

        try:
            return cls._load(env, settings_file, envvar_prefix)
        finally:
            _restore_environ(selector, original)

    @classmethod
    def _load(cls, env, settings_file, envvar_prefix):
        # The selector stays set on success, dynaconf consults it when reloading
        selector = f"{envvar_prefix}_ENV"
        original = os.environ.get(selector)
        os.environ[selector] = env or original or DEFAULT_ENVIRONMENT

        try:
            settings = cls(
                settings_file=[_BUILTIN_SETTINGS],
                includes=[settings_file] if settings_file else [],
                core_loaders=["TOML"],
                environments=True,
                env_switcher=selector,
                envvar_prefix=envvar_prefix,
            )
        except Exception as e:
            _restore_environ(selector, original)
            raise ConfigError(str(e)) from e

        try:
            # Every environment but [default] names the store
            if not settings.env_for_dynaconf or settings.store_url is None:
                raise KeyError(selector)
        except (AttributeError, KeyError):
            message = f"Configuration '{os.environ[selector]}' doesn't exist!"
            _restore_environ(selector, original)

            if not env:
                message += f" Check your {selector} environment variable."

            raise ConfigError(message) from None

        return settings


get_settings = Settings.get_settings
"""An alias for :py:meth:`Settings.get_settings`"""

peek_settings = Settings.peek_settings
"""An alias for :py:meth:`Settings.peek_settings`"""

select_env = Settings.select_env
"""An alias for :py:meth:`Settings.select_env`"""

__all__ = [
    "DEFAULT_ENVIRONMENT",
    "ENVVAR_PREFIX",
    "TESTING_ENVIRONMENT",
    "Settings",
    "get_settings",
    "peek_settings",
    "select_env",
]
