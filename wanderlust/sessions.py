"""
Database-backed server-side sessions.

The browser only receives a signed, opaque session id. The payload (the
logged-in user id written by Flask-Login and any pending flash messages)
lives in the ``sessions`` table next to the domain data, Fernet-encrypted with
a key derived from ``SECRET_KEY``.

Records expire ``PERMANENT_SESSION_LIFETIME`` after their last write. A
session that a request reads but does not change is only re-written
("touched") once ``SESSION_TOUCH_AFTER`` has passed since the previous
touch, so a stored expiry may lag the real last access by up to that window.
"""
import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta

from cryptography.fernet import Fernet, InvalidToken
from flask.json.tag import TaggedJSONSerializer
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import CallbackDict

from wanderlust import db
from wanderlust.errors import InfrastructureError
from wanderlust.models import StoredSession

logger = logging.getLogger(__name__)


class DatabaseSession(CallbackDict, SessionMixin):

    def __init__(self, initial=None, sid=None, new=False, touched_at=None):
        def on_update(self):
            self.modified = True

        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.new = new
        self.touched_at = touched_at
        self.modified = False


class DatabaseSessionInterface(SessionInterface):
    session_class = DatabaseSession
    serializer = TaggedJSONSerializer()
    salt = 'wanderlust-session'

    def _get_signer(self, app):
        if not app.secret_key:
            return None
        return Signer(app.secret_key, salt=self.salt)

    def _get_cipher(self, app):
        secret = app.secret_key
        if isinstance(secret, str):
            secret = secret.encode('utf-8')
        key = hashlib.sha256(self.salt.encode('utf-8') + secret).digest()
        return Fernet(base64.urlsafe_b64encode(key))

    def dump_payload(self, app, session):
        raw = self.serializer.dumps(dict(session)).encode('utf-8')
        return self._get_cipher(app).encrypt(raw).decode('ascii')

    def load_payload(self, app, data):
        """Decrypt a stored payload. Raises ``InvalidToken`` if it was not written with this key."""
        raw = self._get_cipher(app).decrypt(data)
        return self.serializer.loads(raw.decode('utf-8'))

    @staticmethod
    def _generate_sid():
        return secrets.token_urlsafe(32)

    def _new_session(self):
        return self.session_class(sid=self._generate_sid(), new=True)

    def open_session(self, app, request):
        signer = self._get_signer(app)
        if signer is None:
            return None  # Flask falls back to a null session and refuses writes

        signed_sid = request.cookies.get(self.get_cookie_name(app))
        if not signed_sid:
            return self._new_session()

        try:
            sid = signer.unsign(signed_sid).decode('utf-8')
        except BadSignature:
            logger.warning("Rejected session cookie with a bad signature")
            return self._new_session()

        record = db.session.get(StoredSession, sid)
        if record is None:
            return self._new_session()

        if record.is_expired():
            logger.debug(f"Session {sid[:8]}... expired at {record.expires_at}, discarding")
            self._delete(record)
            return self._new_session()

        try:
            data = self.load_payload(app, record.data)
        except InvalidToken:
            logger.warning(f"Session {sid[:8]}... could not be decrypted, discarding")
            self._delete(record)
            return self._new_session()
        return self.session_class(data, sid=sid, touched_at=record.touched_at)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if not session:
            # Emptied (logout with nothing left to flash): drop the record and the cookie.
            # Brand-new empty sessions are never persisted.
            if session.modified and not session.new:
                self._delete(db.session.get(StoredSession, session.sid))
                response.delete_cookie(name, domain=domain, path=path)
            return

        now = datetime.utcnow()
        expires = now + app.permanent_session_lifetime

        if session.modified or session.new:
            self._write(app, session, now, expires)
        elif session.touched_at is None or now - session.touched_at >= self.get_touch_after(app):
            self._touch(session.sid, now, expires)
        else:
            return

        signed_sid = self._get_signer(app).sign(session.sid.encode('utf-8')).decode('utf-8')
        response.set_cookie(
            name,
            signed_sid,
            expires=expires,
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )

    @staticmethod
    def get_touch_after(app):
        return app.config.get('SESSION_TOUCH_AFTER', timedelta(hours=24))

    def _write(self, app, session, now, expires):
        record = db.session.get(StoredSession, session.sid)
        if record is None:
            record = StoredSession(sid=session.sid)
            db.session.add(record)
        record.data = self.dump_payload(app, session)
        record.expires_at = expires
        record.touched_at = now
        self._commit("write")

    def _touch(self, sid, now, expires):
        record = db.session.get(StoredSession, sid)
        if record is None:
            return
        record.expires_at = expires
        record.touched_at = now
        self._commit("touch")

    def _delete(self, record):
        if record is None:
            return
        db.session.delete(record)
        self._commit("delete")

    @staticmethod
    def _commit(action):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"ERROR in session store during {action}: {e}")
            raise InfrastructureError() from e


def purge_expired_sessions(now=None):
    """Delete every expired session record. Returns the number removed."""
    now = now or datetime.utcnow()
    removed = StoredSession.query.filter(StoredSession.expires_at <= now).delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"Purged {removed} expired session(s)")
    return removed
