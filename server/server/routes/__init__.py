"""Route registrations for the WebAuthn decoding service."""

# Import submodules to register routes via decorators.
from . import decode  # noqa: F401
from . import general  # noqa: F401

__all__ = ["decode", "general"]
