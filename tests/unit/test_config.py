#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from pathlib import Path
from typing import get_args

import pytest
from aws_signature.config import (
    SOURCE_CONSTRUCTOR,
    SOURCE_DEFAULT,
    SOURCE_ENVIRONMENT,
    SOURCE_IN_CODE_UPDATE,
    CredentialsConfig,
    SourceType,
    default_credentials_file,
)


class TestCredentialsConfig:
    def test_defaults(self, isolated_environment: Path):
        config = CredentialsConfig(environ={})
        assert config.profile == "default"
        assert config.default_region is None
        assert config.shared_credentials_file == (
            isolated_environment / ".aws" / "credentials"
        )
        for field_name in CredentialsConfig.CONFIG_FIELDS:
            assert config.get_config_value_object(field_name).source == SOURCE_DEFAULT

    @pytest.mark.parametrize(
        "field_name,env_var,value",
        [
            ("profile", "AWS_PROFILE", "dev"),
            ("default_region", "AWS_DEFAULT_REGION", "eu-central-1"),
        ],
    )
    def test_resolve_from_environment(self, field_name: str, env_var: str, value: str):
        config = CredentialsConfig(environ={env_var: value})
        assert getattr(config, field_name) == value
        assert config.get_config_value_object(field_name).source == SOURCE_ENVIRONMENT

    def test_credentials_file_from_environment_is_expanded(
        self, isolated_environment: Path
    ):
        config = CredentialsConfig(
            environ={"AWS_SHARED_CREDENTIALS_FILE": "~/custom/credentials"}
        )
        assert config.shared_credentials_file == (
            isolated_environment / "custom" / "credentials"
        )
        source = config.get_config_value_object("shared_credentials_file").source
        assert source == SOURCE_ENVIRONMENT

    def test_constructor_wins_over_environment(self):
        config = CredentialsConfig(
            profile="explicit", environ={"AWS_PROFILE": "from-env"}
        )
        assert config.profile == "explicit"
        assert config.get_config_value_object("profile").source == SOURCE_CONSTRUCTOR

    def test_empty_environment_value_ignored(self):
        config = CredentialsConfig(environ={"AWS_PROFILE": ""})
        assert config.profile == "default"
        assert config.get_config_value_object("profile").source == SOURCE_DEFAULT

    def test_custom_prefix(self):
        config = CredentialsConfig(
            env_prefix="",
            environ={"PROFILE": "bare", "AWS_PROFILE": "prefixed"},
        )
        assert config.profile == "bare"
        assert config.env_var("ACCESS_KEY_ID") == "ACCESS_KEY_ID"

    def test_getenv_treats_empty_as_unset(self):
        config = CredentialsConfig(
            environ={"AWS_ACCESS_KEY_ID": "", "AWS_SECRET_ACCESS_KEY": "secret"}
        )
        assert config.getenv("ACCESS_KEY_ID") is None
        assert config.getenv("SECRET_ACCESS_KEY") == "secret"

    def test_in_code_update(self, tmp_path: Path):
        config = CredentialsConfig(environ={})
        config.profile = "updated"
        config.default_region = "us-west-2"
        config.shared_credentials_file = tmp_path / "creds"
        assert config.profile == "updated"
        assert config.default_region == "us-west-2"
        assert config.shared_credentials_file == tmp_path / "creds"
        for field_name in CredentialsConfig.CONFIG_FIELDS:
            source = config.get_config_value_object(field_name).source
            assert source == SOURCE_IN_CODE_UPDATE

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            CredentialsConfig(environ={}).get_config_value_object("unknown")


def test_default_credentials_file(isolated_environment: Path):
    assert default_credentials_file({}) == isolated_environment / ".aws" / "credentials"


def test_source_types():
    assert set(get_args(SourceType)) == {
        SOURCE_CONSTRUCTOR,
        SOURCE_ENVIRONMENT,
        SOURCE_DEFAULT,
        SOURCE_IN_CODE_UPDATE,
    }
