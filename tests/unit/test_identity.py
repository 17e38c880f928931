#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from datetime import UTC, datetime, timedelta

import pytest
from aws_signature import AWSCredentialIdentity
from aws_signature.interfaces.identity import AWSCredentialsIdentity, Identity
from freezegun import freeze_time


@pytest.mark.parametrize(
    "access_key_id,secret_access_key,session_token,region,expiration",
    [
        ("AKID1234EXAMPLE", "SECRET1234", None, None, None),
        ("AKID1234EXAMPLE", "SECRET1234", "SESS_TOKEN_1234", None, None),
        ("AKID1234EXAMPLE", "SECRET1234", None, "us-west-2", None),
        (
            "AKID1234EXAMPLE",
            "SECRET1234",
            "SESS_TOKEN_1234",
            "us-west-2",
            datetime(2024, 5, 1, 0, 0, 0, tzinfo=UTC),
        ),
    ],
)
def test_aws_credential_identity(
    access_key_id: str,
    secret_access_key: str,
    session_token: str | None,
    region: str | None,
    expiration: datetime | None,
) -> None:
    creds = AWSCredentialIdentity(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region=region,
        expiration=expiration,
    )
    assert creds.access_key_id == access_key_id
    assert creds.secret_access_key == secret_access_key
    assert creds.session_token == session_token
    assert creds.region == region
    assert creds.expiration == expiration
    assert isinstance(creds, AWSCredentialsIdentity)
    assert isinstance(creds, Identity)


@pytest.mark.parametrize(
    "time_delta,is_expired",
    [
        (timedelta(seconds=-1), True),
        (timedelta(seconds=0), True),
        (timedelta(seconds=1), False),
        (timedelta(days=1), False),
    ],
)
@freeze_time("2024-05-14 12:00:00")
def test_aws_credential_identity_expired(
    time_delta: timedelta, is_expired: bool
) -> None:
    expiration = datetime.now(UTC) + time_delta
    creds = AWSCredentialIdentity(
        access_key_id="AKID1234EXAMPLE",
        secret_access_key="SECRET1234",
        expiration=expiration,
    )
    assert creds.is_expired is is_expired


def test_identity_without_expiration_never_expires() -> None:
    creds = AWSCredentialIdentity(access_key_id="AKID", secret_access_key="SECRET")
    assert creds.is_expired is False


def test_repr_hides_secrets() -> None:
    creds = AWSCredentialIdentity(
        access_key_id="AKIDVISIBLE",
        secret_access_key="HIDDEN-SECRET",
        session_token="HIDDEN-TOKEN",
    )
    text = repr(creds)
    assert "AKIDVISIBLE" in text
    assert "HIDDEN-SECRET" not in text
    assert "HIDDEN-TOKEN" not in text


def test_identity_is_immutable_and_comparable() -> None:
    first = AWSCredentialIdentity(access_key_id="AKID", secret_access_key="SECRET")
    second = AWSCredentialIdentity(access_key_id="AKID", secret_access_key="SECRET")
    assert first == second
    with pytest.raises(AttributeError):
        first.access_key_id = "OTHER"  # type: ignore
