"""Flask service exposing the webauthn_codec decoders over HTTP."""
from .app import app, main

__all__ = ["app", "main"]
