"""
Credential verification for the two channels the API accepts.

* the ``access_token`` cookie: a short-lived HS256 JWT carrying an ``email``
  claim, issued by ``POST /jwt``;
* the ``Authorization: Bearer`` header: an ID token issued by the identity
  provider (Firebase), carrying ``uid``, ``email`` and ``email_verified``.
"""
import base64
import binascii
import json
import logging
from datetime import datetime, timedelta, timezone

import firebase_admin
import jwt
from django.conf import settings
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from jwt import ExpiredSignatureError, InvalidTokenError

from storefront.exceptions import Forbidden, Internal, Unauthorized

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = 'storefront'


def load_service_account(encoded):
    """Decode the base64 service-account JSON kept in ``FB_SERVICE_KEY``."""
    try:
        return json.loads(base64.b64decode(encoded).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise Internal('Identity provider key is not valid base64 JSON')


def get_firebase_app():
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass
    if not settings.FB_SERVICE_KEY:
        raise Internal('Identity provider is not configured')
    cred = credentials.Certificate(load_service_account(settings.FB_SERVICE_KEY))
    logger.info('Initialising identity provider app %s', FIREBASE_APP_NAME)
    return firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)


class Caller:
    """The identity attached to ``request.user`` once a credential checks out."""

    is_authenticated = True

    def __init__(self, uid=None, email=None, email_verified=False, channel='bearer'):
        self.uid = uid
        self.email = email
        self.email_verified = email_verified
        self.channel = channel

    def __repr__(self):
        return f'Caller(uid={self.uid!r}, email={self.email!r}, channel={self.channel!r})'


class IdentityGateway:

    def issue_session_token(self, email):
        now = datetime.now(timezone.utc)
        payload = {
            'email': email,
            'iat': now,
            'exp': now + timedelta(days=settings.JWT_TTL_DAYS),
        }
        return jwt.encode(payload, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALG)

    def verify_session_token(self, token):
        if not token:
            raise Unauthorized()
        try:
            return jwt.decode(token, settings.JWT_ACCESS_SECRET, algorithms=[settings.JWT_ALG])
        except ExpiredSignatureError:
            raise Forbidden('Invalid access token')
        except InvalidTokenError:
            raise Forbidden('Invalid access token')

    def verify_bearer_token(self, token):
        if not token:
            raise Unauthorized()
        try:
            claims = firebase_auth.verify_id_token(token, app=get_firebase_app())
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError, ValueError) as exc:
            logger.info('Rejected bearer token: %s', exc)
            raise Unauthorized('Unauthorized access, invalid token')
        return Caller(
            uid=claims.get('uid'),
            email=(claims.get('email') or '').lower() or None,
            email_verified=bool(claims.get('email_verified')),
            channel='bearer',
        )
