"""
core/auth.py — obs-websocket challenge/response.

    secret   = base64(sha256(password + salt))
    response = base64(sha256(secret + challenge))
"""

from __future__ import annotations

import base64
import hashlib


def _digest_b64(*parts: str) -> str:
    h = hashlib.sha256()
    for part in parts:
        h.update(part.encode("utf-8"))
    return base64.b64encode(h.digest()).decode("ascii")


def auth_response(password: str, salt: str, challenge: str) -> str:
    secret = _digest_b64(password, salt)
    return _digest_b64(secret, challenge)
