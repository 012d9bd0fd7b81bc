"""Registration and assertion flows over an injected credential provider.

The provider stands in for the platform credential API (for example a browser
bridge or a CTAP client). It returns raw byte buffers, which are decoded here
with the strict decoders of this package. Signature verification is left to
the caller.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import NamedTuple, Optional, Protocol, Sequence

from fido2.webauthn import (
    AttestationConveyancePreference,
    PublicKeyCredentialCreationOptions,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialParameters,
    PublicKeyCredentialRequestOptions,
    PublicKeyCredentialRpEntity,
    PublicKeyCredentialType,
    PublicKeyCredentialUserEntity,
)

from .cose import COSEAlgorithm
from .errors import MalformedInput, NoCredentialReturned
from .signature import decode_signature
from .webauthn import AuthenticatorData, decode_attestation

logger = logging.getLogger(__name__)

__all__ = [
    "Assertion",
    "CredentialProvider",
    "RawAssertion",
    "RawAttestation",
    "Registration",
    "authenticate",
    "build_creation_options",
    "build_request_options",
    "register",
]

# Requested in order of preference. RS256 is offered to the authenticator even
# though an RSA credential cannot be decoded and fails registration.
REQUESTED_ALGORITHMS: Sequence[COSEAlgorithm] = (
    COSEAlgorithm.EDDSA,
    COSEAlgorithm.ES256,
    COSEAlgorithm.RS256,
)

CHALLENGE_LENGTH = 32


class RawAttestation(NamedTuple):
    """Raw output of a credential creation."""

    credential_id: bytes
    client_data_json: bytes
    attestation_object: bytes


class RawAssertion(NamedTuple):
    """Raw output of a credential assertion."""

    credential_id: bytes
    client_data_json: bytes
    authenticator_data: bytes
    signature: bytes


class CredentialProvider(Protocol):
    """The platform capability creating and exercising credentials."""

    def create_credential(
        self, options: PublicKeyCredentialCreationOptions
    ) -> Optional[RawAttestation]:
        ...

    def get_assertion(
        self, options: PublicKeyCredentialRequestOptions
    ) -> Optional[RawAssertion]:
        ...


@dataclass(frozen=True)
class Registration:
    credential_id: bytes
    client_data: str
    authenticator_data: AuthenticatorData


@dataclass(frozen=True)
class Assertion:
    credential_id: bytes
    authenticator_data: bytes
    client_data_json: bytes
    r: int
    s: int


def build_creation_options(
    rp: PublicKeyCredentialRpEntity,
    user: PublicKeyCredentialUserEntity,
    challenge: bytes,
) -> PublicKeyCredentialCreationOptions:
    """Create the options passed to the provider on registration."""
    return PublicKeyCredentialCreationOptions(
        rp=rp,
        user=user,
        challenge=challenge,
        pub_key_cred_params=[
            PublicKeyCredentialParameters(
                type=PublicKeyCredentialType.PUBLIC_KEY, alg=int(alg)
            )
            for alg in REQUESTED_ALGORITHMS
        ],
        attestation=AttestationConveyancePreference.NONE,
    )


def build_request_options(
    credential_ids: Sequence[bytes], challenge: Optional[bytes] = None
) -> PublicKeyCredentialRequestOptions:
    """Create the options passed to the provider on authentication.

    A random challenge is generated when none is given.
    """
    if challenge is None:
        challenge = os.urandom(CHALLENGE_LENGTH)
    return PublicKeyCredentialRequestOptions(
        challenge=challenge,
        allow_credentials=[
            PublicKeyCredentialDescriptor(
                type=PublicKeyCredentialType.PUBLIC_KEY, id=credential_id
            )
            for credential_id in credential_ids
        ],
    )


def register(
    provider: CredentialProvider,
    rp: PublicKeyCredentialRpEntity,
    user: PublicKeyCredentialUserEntity,
    challenge: bytes,
) -> Registration:
    """Create a credential and decode the returned attestation object.

    :raises NoCredentialReturned: If the provider returned nothing.
    :raises DecodeError: If the attestation object is not acceptable.
    """
    response = provider.create_credential(build_creation_options(rp, user, challenge))
    if response is None:
        raise NoCredentialReturned("No public key credential returned")

    try:
        client_data = bytes(response.client_data_json).decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInput("Client data is not valid UTF-8") from e

    logger.debug(
        "Decoding attestation object for credential %s",
        bytes(response.credential_id).hex(),
    )
    return Registration(
        credential_id=bytes(response.credential_id),
        client_data=client_data,
        authenticator_data=decode_attestation(response.attestation_object),
    )


def authenticate(
    provider: CredentialProvider,
    credential_ids: Sequence[bytes],
    challenge: Optional[bytes] = None,
) -> Assertion:
    """Request an assertion and extract the signature integers.

    :raises NoCredentialReturned: If the provider returned nothing.
    :raises InvalidSignatureEncoding: If the signature is not DER encoded.
    """
    response = provider.get_assertion(build_request_options(credential_ids, challenge))
    if response is None:
        raise NoCredentialReturned("No assertion returned")

    signature = decode_signature(response.signature)
    return Assertion(
        credential_id=bytes(response.credential_id),
        authenticator_data=bytes(response.authenticator_data),
        client_data_json=bytes(response.client_data_json),
        r=signature.r,
        s=signature.s,
    )
