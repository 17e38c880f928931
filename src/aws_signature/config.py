# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar, Literal

SOURCE_CONSTRUCTOR = "constructor"
SOURCE_ENVIRONMENT = "environment"
SOURCE_DEFAULT = "default"
SOURCE_IN_CODE_UPDATE = "in_code_update"

SourceType = Literal[
    "constructor",
    "environment",
    "default",
    "in_code_update",
]

DEFAULT_ENV_PREFIX = "AWS_"
DEFAULT_PROFILE = "default"

# Names of the variables without their prefix.
ACCESS_KEY_ID = "ACCESS_KEY_ID"
SECRET_ACCESS_KEY = "SECRET_ACCESS_KEY"  # noqa: S105
SESSION_TOKEN = "SESSION_TOKEN"  # noqa: S105
DEFAULT_REGION = "DEFAULT_REGION"
PROFILE = "PROFILE"
SHARED_CREDENTIALS_FILE = "SHARED_CREDENTIALS_FILE"


def default_credentials_file(environ: Mapping[str, str] | None = None) -> Path:
    """The conventional location of the shared credentials file.

    On Windows the home directory is taken from ``USERPROFILE``; elsewhere the
    user's home directory is used.
    """
    if environ is None:
        environ = os.environ
    if sys.platform == "win32" and environ.get("USERPROFILE"):
        home = Path(environ["USERPROFILE"])
    else:
        home = Path.home()
    return home / ".aws" / "credentials"


class ConfigValue:
    """Configuration value with metadata about its source"""

    def __init__(self, value: Any, source: SourceType):
        self.value = value
        self.source = source

    def __repr__(self) -> str:
        return f"ConfigValue(value={self.value!r}, source={self.source!r})"


class CredentialsConfig:
    """Settings that steer where credentials are looked up.

    Every field is resolved with the precedence constructor > environment >
    default, and remembers which of those it came from. The environment is read
    from the supplied mapping so tests and embedding applications never have to
    touch ``os.environ``.

    :param profile: Name of the profile to read from the credentials file.
    :param shared_credentials_file: Path of the credentials file.
    :param default_region: Region to use when no credential source names one.
    :param env_prefix: Prefix prepended to every variable name. ``"AWS_"`` by
        default, so the access key is read from ``AWS_ACCESS_KEY_ID``.
    :param environ: Mapping to read variables from, ``os.environ`` by default.
    """

    CONFIG_FIELDS: ClassVar[dict[str, dict[str, Any]]] = {
        "profile": {"env_var": PROFILE, "type": str},
        "shared_credentials_file": {
            "env_var": SHARED_CREDENTIALS_FILE,
            "type": Path,
        },
        "default_region": {"env_var": DEFAULT_REGION, "type": str | None},
    }

    def __init__(
        self,
        *,
        profile: str | None = None,
        shared_credentials_file: str | os.PathLike[str] | None = None,
        default_region: str | None = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ):
        self.env_prefix = env_prefix
        self.environ: Mapping[str, str] = os.environ if environ is None else environ
        constructor_values: dict[str, Any] = {
            "profile": profile,
            "shared_credentials_file": shared_credentials_file,
            "default_region": default_region,
        }
        defaults: dict[str, Any] = {
            "profile": DEFAULT_PROFILE,
            "shared_credentials_file": default_credentials_file(self.environ),
            "default_region": None,
        }
        for field_name, field_info in self.CONFIG_FIELDS.items():
            resolved = self._resolve_field(
                constructor_value=constructor_values[field_name],
                env_var=self.env_var(field_info["env_var"]),
                default_value=defaults[field_name],
            )
            if field_info["type"] is Path and resolved.value is not None:
                resolved.value = Path(resolved.value).expanduser()
            setattr(self, f"_{field_name}", resolved)

    def env_var(self, name: str) -> str:
        """The full variable name for ``name`` under the configured prefix."""
        return f"{self.env_prefix}{name}"

    def getenv(self, name: str) -> str | None:
        """Read a prefixed variable, treating empty strings as unset."""
        return self.environ.get(self.env_var(name)) or None

    def _resolve_field(
        self, *, constructor_value: Any, env_var: str, default_value: Any
    ) -> ConfigValue:
        if constructor_value is not None:
            return ConfigValue(constructor_value, SOURCE_CONSTRUCTOR)
        if self.environ.get(env_var):
            return ConfigValue(self.environ[env_var], SOURCE_ENVIRONMENT)
        return ConfigValue(default_value, SOURCE_DEFAULT)

    def get_config_value_object(self, field_name: str) -> ConfigValue:
        """Get the raw ConfigValue object for a field"""
        if field_name not in self.CONFIG_FIELDS:
            raise KeyError(field_name)
        return getattr(self, f"_{field_name}")

    @property
    def profile(self) -> str:
        return self._profile.value

    @profile.setter
    def profile(self, value: str) -> None:
        self._profile = ConfigValue(value, SOURCE_IN_CODE_UPDATE)

    @property
    def shared_credentials_file(self) -> Path:
        return self._shared_credentials_file.value

    @shared_credentials_file.setter
    def shared_credentials_file(self, value: str | os.PathLike[str]) -> None:
        self._shared_credentials_file = ConfigValue(
            Path(value).expanduser(), SOURCE_IN_CODE_UPDATE
        )

    @property
    def default_region(self) -> str | None:
        return self._default_region.value

    @default_region.setter
    def default_region(self, value: str | None) -> None:
        self._default_region = ConfigValue(value, SOURCE_IN_CODE_UPDATE)
