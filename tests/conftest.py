import cbor2
import pytest

from builders import build_authenticator_data, eddsa_cose_map, es256_cose_map


@pytest.fixture
def es256_cose():
    return es256_cose_map()


@pytest.fixture
def eddsa_cose():
    return eddsa_cose_map()


@pytest.fixture
def attested_auth_data(es256_cose):
    """Authenticator data with UP and AT set, a 16 byte id and an ES256 key."""
    credential_id = bytes(range(16))
    data = build_authenticator_data(
        flags=0x41,
        sign_count=1,
        credential_id=credential_id,
        public_key=cbor2.dumps(es256_cose),
    )
    return data, credential_id, es256_cose
