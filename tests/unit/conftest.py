#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from pathlib import Path

import pytest

_AWS_VARIABLES = (
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_DEFAULT_REGION",
    "AWS_PROFILE",
    "AWS_SHARED_CREDENTIALS_FILE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the home directory at an empty location and unset AWS variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for name in _AWS_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def credentials_path(tmp_path: Path) -> Path:
    path = tmp_path / "credentials"
    path.write_text(
        "[default]\n"
        "aws_access_key_id = AKIDDEFAULT\n"
        "aws_secret_access_key = default-secret\n"
        "\n"
        "[dev]\n"
        "ACCESS_KEY_ID = AKIDDEV\n"
        "SECRET_ACCESS_KEY = dev-secret\n"
        "SESSION_TOKEN = dev-token\n"
        "REGION = eu-west-1\n"
        "\n"
        "[partial]\n"
        "aws_access_key_id = AKIDPARTIAL\n",
        encoding="utf-8",
    )
    return path
