"""Challenge signing for the Freebox session handshake."""

from __future__ import annotations

import hashlib
import hmac


def sign_challenge(app_token: str, challenge: str) -> str:
    """Return the session password for a login challenge.

    The password is the hex HMAC-SHA1 of the challenge keyed with the
    application token granted during pairing.
    """
    return hmac.new(
        app_token.encode("utf-8"), challenge.encode("utf-8"), hashlib.sha1
    ).hexdigest()
