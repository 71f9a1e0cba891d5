"""
Client Configuration Module.

This module defines `ClientConfig`, the four settings a session needs
(database, username, password, base URL). Loading the values (process
environment, `.env` file) is kept apart from validating them, so the same
pure validation step applies wherever the values come from.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

from dotenv import dotenv_values

from ..errors import ConfigError

# Variable names used in `.env` files
ENV_DATABASE = "DATABASE"
ENV_USERNAME = "USERNAME"
ENV_PASSWORD = "PASSWORD"
ENV_URL = "URL"

_ENV_KEYS = {
    "database": ENV_DATABASE,
    "username": ENV_USERNAME,
    "password": ENV_PASSWORD,
    "url": ENV_URL,
}


@dataclass(frozen=True)
class ClientConfig:
    """
    Session credentials. Immutable once built.

    Attributes:
        database (str): Name of the remote database.
        username (str): Login of the user.
        password (str): Password or API key of the user.
        url (str): Base URL of the server (e.g. 'https://erp.example.com').
    """

    database: str
    username: str
    password: str
    url: str

    def __repr__(self) -> str:
        # keep the secret out of logs and tracebacks
        return (
            f"ClientConfig(database={self.database!r}, username={self.username!r}, "
            f"password='***', url={self.url!r})"
        )

    @property
    def base_url(self) -> str:
        """The base URL without trailing slashes."""
        return self.url.rstrip("/")

    def validate(self) -> "ClientConfig":
        """
        Checks every field and reports all the problems at once.

        Returns:
            ClientConfig: `self`, to allow chaining.

        Raises:
            ConfigError: If any field is missing, empty or invalid.
        """
        problems = []
        for fld in fields(self):
            value = getattr(self, fld.name)
            if value is None or not isinstance(value, str) or not value.strip():
                problems.append(f"'{fld.name}' is missing or empty")

        if isinstance(self.url, str) and self.url.strip():
            parsed = urlparse(self.url)
            if parsed.scheme not in ("http", "https"):
                problems.append(
                    f"'url' must use the http or https scheme, got '{self.url}'"
                )
            elif not parsed.netloc:
                problems.append(f"'url' has no host: '{self.url}'")

        if problems:
            raise ConfigError(problems)
        return self

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, Optional[str]], prefix: str = ""
    ) -> "ClientConfig":
        """
        Builds a validated config from a mapping of environment-style keys
        (`DATABASE`, `USERNAME`, `PASSWORD`, `URL`, optionally prefixed).

        Raises:
            ConfigError: If the resulting config is not valid.
        """
        kwargs = {
            attr: (values.get(prefix + key) or "") for attr, key in _ENV_KEYS.items()
        }
        return cls(**kwargs).validate()

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Union[str, Path]] = None,
        prefix: str = "",
    ) -> "ClientConfig":
        """
        Reads the settings from the process environment and, if given, from a
        `.env` file. Values found in the file take precedence.
        The process environment is never modified.

        Args:
            env_path: Path to a `.env` file. If None, only the environment is used.
            prefix (str): Optional prefix of the variable names (e.g. 'ODOO_').

        Raises:
            ConfigError: If the file does not exist or the config is not valid.
        """
        values = {
            prefix + key: os.environ.get(prefix + key) for key in _ENV_KEYS.values()
        }
        if env_path is not None:
            env_file = Path(env_path)
            if not env_file.is_file():
                raise ConfigError([f"env file '{env_file}' not found"])
            file_values = dotenv_values(env_file)
            values.update({k: v for k, v in file_values.items() if v is not None})
        return cls.from_mapping(values, prefix=prefix)
