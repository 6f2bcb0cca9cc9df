import base64
import binascii
import secrets
import time

from itsdangerous import BadSignature, TimestampSigner

from .errors import InvalidSession


class SessionCodec:
    """Builds and reads the ``session`` cookie value.

    A token is ``base64("<user id>:<epoch millis>:<32 hex chars>")``. It is not
    a MAC: anyone who can base64-encode a known user id can mint one, and
    tokens never expire. With a ``signer`` the token is additionally signed
    and timestamped by itsdangerous, and ``max_age`` (seconds) is enforced.
    """

    def __init__(self, signer=None, max_age=None):
        self.signer = signer
        self.max_age = max_age

    @classmethod
    def from_config(cls, config):
        if not config.get("SESSION_SIGNING"):
            return cls()
        secret = config.get("SECRET_KEY")
        if not secret:
            raise RuntimeError("FLASK_SECRET_KEY not set but session signing is enabled")
        return cls(TimestampSigner(secret, salt="session-token"), config.get("SESSION_MAX_AGE"))

    def issue(self, user_id):
        raw = f"{user_id}:{int(time.time() * 1000)}:{secrets.token_hex(16)}"
        token = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        if self.signer is not None:
            token = self.signer.sign(token).decode("ascii")
        return token

    def decode(self, token):
        """Return the user id carried by ``token``; raise InvalidSession."""
        if not token:
            raise InvalidSession()
        if self.signer is not None:
            try:
                token = self.signer.unsign(token, max_age=self.max_age).decode("ascii")
            except BadSignature:
                raise InvalidSession() from None
        try:
            padded = token + "=" * (-len(token) % 4)
            decoded = base64.b64decode(padded).decode("utf-8")
        except (binascii.Error, ValueError):
            raise InvalidSession() from None
        user_id = decoded.split(":", 1)[0]
        if not user_id:
            raise InvalidSession()
        return user_id
