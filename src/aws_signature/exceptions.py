# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class AWSSignatureWarning(UserWarning): ...


class BaseAWSSignatureException(Exception):
    """Top-level exception to capture signing and credential errors."""


class ParseError(BaseAWSSignatureException, ValueError):
    """The text of a credentials store could not be parsed."""

    def __init__(self, message: str, *, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class CredentialsFileNotFoundError(BaseAWSSignatureException, FileNotFoundError):
    """The credentials store does not exist at the requested path."""


class IdentityError(BaseAWSSignatureException):
    """Base exception type for all exceptions raised in identity resolution.

    Raised by an individual credential source that is unable to produce credentials.
    """


class CredentialsNotFoundError(IdentityError):
    """None of the credential sources yielded an access key and secret key."""


class SigningError(BaseAWSSignatureException, ValueError):
    """A signature could not be computed from the supplied inputs."""
