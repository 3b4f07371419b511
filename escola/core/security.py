import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

# Token simples: base64url(payload json) + "." + base64url(hmac-sha256).
# Nada de refresh nem revogacao: expira pelo "exp".


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("utf-8"))


def _signature(msg: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), msg, hashlib.sha256).digest()


def sign(payload: Dict[str, Any], secret: str, ttl_seconds: int) -> str:
    now = int(time.time())
    body = {"iat": now, "exp": now + int(ttl_seconds), **payload}
    msg = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return _b64url_encode(msg) + "." + _b64url_encode(_signature(msg, secret))


def verify(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Return the payload of a valid, unexpired token, or None."""
    msg_b64, sep, sig_b64 = token.partition(".")
    if not sep:
        return None

    try:
        msg = _b64url_decode(msg_b64)
        sig = _b64url_decode(sig_b64)
    except ValueError:
        return None

    if not hmac.compare_digest(sig, _signature(msg, secret)):
        return None

    try:
        payload = json.loads(msg.decode("utf-8"))
    except ValueError:
        return None

    if int(payload.get("exp", 0)) < int(time.time()):
        return None
    return payload
