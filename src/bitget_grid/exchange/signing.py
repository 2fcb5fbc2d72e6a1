from __future__ import annotations

import base64
import hmac
import time
from hashlib import sha256


def now_ms() -> int:
    return int(time.time() * 1000)


def build_prehash(timestamp_ms: int | str, method: str, path: str, body: str = "") -> str:
    """Return the string Bitget expects to be signed.

    ``path`` must include the query string, if any, exactly as requested.
    """
    return f"{timestamp_ms}{method.upper()}{path}{body}"


def sign_prehash(prehash: str, api_secret: str) -> str:
    mac = hmac.new(api_secret.encode("utf-8"), prehash.encode("utf-8"), sha256)
    return base64.b64encode(mac.digest()).decode("ascii")


def build_auth_headers(
    *,
    api_key: str,
    api_secret: str,
    passphrase: str,
    method: str,
    path: str,
    body: str = "",
    timestamp_ms: int | None = None,
) -> dict[str, str]:
    # An empty secret still yields a signature; Bitget rejects it server side.
    timestamp = str(timestamp_ms if timestamp_ms is not None else now_ms())
    signature = sign_prehash(build_prehash(timestamp, method, path, body), api_secret)
    return {
        "ACCESS-KEY": api_key,
        "ACCESS-SIGN": signature,
        "ACCESS-TIMESTAMP": timestamp,
        "ACCESS-PASSPHRASE": passphrase,
        "Content-Type": "application/json",
    }
