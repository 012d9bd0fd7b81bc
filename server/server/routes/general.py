"""General application routes."""
from __future__ import annotations

from flask import jsonify

import webauthn_codec

from ..config import app, configured_rp_id, max_payload_bytes


@app.route("/api/health", methods=["GET"])
def api_health():
    return jsonify(
        {
            "status": "ok",
            "version": webauthn_codec.__version__,
            "rpId": configured_rp_id(),
            "maxPayloadBytes": max_payload_bytes(),
        }
    )
