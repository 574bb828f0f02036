"""
Session and authentication bootstrap.

TokenStore is the only place the bearer token is read from or written to.
Writers identify themselves with ``origin`` so a subscriber can ignore the
changes it made itself; changes from any other origin (another tab, another
process sharing the storage) are how sign-in and sign-out propagate.

AuthSession owns the current user. It never surfaces an error for an
expired or rejected token: the session falls back to anonymous and the
token is cleared.
"""

import logging
import threading

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .exceptions import BantuinError
from .serializers import ActivateSellerSerializer, validate_form

logger = logging.getLogger(__name__)

TOKEN_STORAGE_KEY = 'access_token'


class TokenStore:
    """
    Persisted bearer token with subscribe/notify.

    Args:
        storage: Mutable mapping the token is persisted in (a dict by default)
        key: Storage key for the token
    """

    def __init__(self, storage=None, key=TOKEN_STORAGE_KEY):
        self.storage = storage if storage is not None else {}
        self.key = key
        self._listeners = []
        self._lock = threading.Lock()

    def get_token(self):
        return self.storage.get(self.key) or None

    def set_token(self, token, origin=None):
        """
        Store a token, or remove it when token is empty, then notify
        subscribers with (token, origin).
        """
        with self._lock:
            if token:
                self.storage[self.key] = token
            else:
                self.storage.pop(self.key, None)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(token or None, origin)
            except Exception:
                logger.exception(f"Token listener {listener!r} failed")

    def clear_token(self, origin=None):
        self.set_token(None, origin=origin)

    def subscribe(self, listener):
        """
        Register listener(token, origin).

        Returns:
            callable: Removes the listener when called
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe


class AuthSession:
    """
    Current user of the front end.

    Attributes:
        user: Profile dict of the signed-in user, or None
        loading: True until the first bootstrap finished and while a profile
            fetch is in flight

    Only one profile fetch runs at a time; a bootstrap requested while
    another is in flight returns immediately with the current user.
    """

    def __init__(self, client, token_store=None):
        self.client = client
        self.token_store = token_store if token_store is not None else client.token_store
        self.user = None
        self.loading = True
        self._fetch_lock = threading.Lock()
        self._listeners = []
        self._unsubscribe = self.token_store.subscribe(self._on_token_change)

    @property
    def is_authenticated(self):
        return self.user is not None

    def subscribe(self, listener):
        """
        Register listener(user), called whenever the user changes.

        Returns:
            callable: Removes the listener when called
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self):
        """Stop following token changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _set_user(self, user):
        changed = user != self.user
        self.user = user
        if changed:
            for listener in list(self._listeners):
                listener(user)

    def bootstrap(self):
        """
        Load the user for the stored token.

        Without a token the session is anonymous. When the profile request
        fails for any reason the token is cleared and the session becomes
        anonymous; nothing is raised.

        Returns:
            dict or None: The user profile
        """
        if not self._fetch_lock.acquire(blocking=False):
            logger.debug("Profile fetch already in flight, skipping bootstrap")
            return self.user

        try:
            self.loading = True

            if not self.token_store.get_token():
                self._set_user(None)
                return None

            try:
                payload = self.client.get('/users/profile/')
            except BantuinError as e:
                logger.warning(f"Session bootstrap failed, signing out locally. Error: {e.message}")
                self.token_store.clear_token(origin=self)
                self._set_user(None)
                return None

            self._set_user(payload.get('data'))
            return self.user
        finally:
            self.loading = False
            self._fetch_lock.release()

    def refresh_user(self):
        """Refetch the profile, e.g. after the role changed."""
        return self.bootstrap()

    def sign_in(self, token):
        """Store the token received from the OAuth callback and load the user."""
        self.token_store.set_token(token, origin=self)
        logger.info("Token stored, loading user profile")
        return self.bootstrap()

    def _on_token_change(self, token, origin):
        if origin is self:
            return
        if not token:
            logger.info("Token removed elsewhere, signing out")
            self._set_user(None)
            self.loading = False
            return
        logger.info("Token changed elsewhere, reloading user profile")
        self.bootstrap()

    def on_visibility_change(self, visible):
        """Re-validate when the view becomes visible with a token but no user."""
        if visible and self.user is None and self.token_store.get_token():
            self.bootstrap()

    def logout(self):
        """
        Invalidate the token server-side, best effort, then always clear
        local state.
        """
        try:
            self.client.post('/auth/logout/')
        except BantuinError as e:
            logger.warning(f"Server-side logout failed, clearing local session anyway. Error: {e.message}")
        finally:
            self.token_store.clear_token(origin=self)
            self._set_user(None)
            self.loading = False

    def login_url(self):
        """
        Google OAuth entry point on the backend.

        Raises:
            ImproperlyConfigured: If BANTUIN_API_URL is not set
        """
        api_url = getattr(settings, 'BANTUIN_API_URL', '')
        if not api_url:
            logger.error("BANTUIN_API_URL is not set. Cannot build the login URL.")
            raise ImproperlyConfigured('BANTUIN_API_URL is not configured')
        return f"{api_url.rstrip('/')}/auth/google"

    def activate_seller_mode(self, phone_number, bio):
        """
        Turn the signed-in user into a seller and reload the profile.

        Raises:
            ValidationFailed: If the phone number or bio is invalid
        """
        body = validate_form(ActivateSellerSerializer, {
            'phoneNumber': phone_number,
            'bio': bio,
        })
        payload = self.client.post('/users/activate-seller/', json=body)
        logger.info("Seller mode activated")
        self.refresh_user()
        return payload.get('data')
