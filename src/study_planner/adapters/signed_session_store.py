"""Session store that keeps the whole session in a signed cookie value."""

from dataclasses import asdict, dataclass

from itsdangerous import BadSignature, URLSafeTimedSerializer

from study_planner.domain.sessions import Identity, SessionState, StoredSession
from study_planner.services.sessions import SessionStore

_SALT = "study-planner-session"


@dataclass
class SignedCookieSessionStore(SessionStore):
    """Stateless store: every app instance holding the secret can read a token.

    Tokens are signed and timestamped, not encrypted. Anything a token carries
    is readable by the browser that holds it.
    """

    secret_key: str
    ttl_seconds: int

    def save(self, session: SessionState, oauth_state: str | None = None) -> str:
        payload = {
            "status": session.status,
            "identity": asdict(session.identity) if session.identity else None,
            "access_token": session.access_token,
            "provider": session.provider,
            "oauth_state": oauth_state,
        }
        return self._serializer().dumps(payload)

    def load(self, token: str) -> StoredSession | None:
        """Return the stored session, or None if forged, expired or malformed."""
        try:
            payload = self._serializer().loads(token, max_age=self.ttl_seconds)
        except BadSignature:
            return None
        if not isinstance(payload, dict) or not isinstance(
            payload.get("status"), str
        ):
            return None
        identity = payload.get("identity")
        session = SessionState(
            status=payload["status"],
            identity=Identity(**identity) if isinstance(identity, dict) else None,
            access_token=payload.get("access_token"),
            provider=payload.get("provider"),
        )
        return StoredSession(session=session, oauth_state=payload.get("oauth_state"))

    def _serializer(self) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(self.secret_key, salt=_SALT)
