"""
Cancellable unread-notification count poller.
"""

import logging
import threading

from django.conf import settings

from .exceptions import BantuinError

logger = logging.getLogger(__name__)

# Seconds stop() waits for an in-flight fetch; a late result is discarded anyway.
STOP_TIMEOUT = 1.0


class UnreadCountPoller:
    """
    Fetch the unread count now and then every ``interval`` seconds.

    Tie it to the lifetime of whatever displays the count:

        with UnreadCountPoller(notifications, badge.update):
            ...

    After stop() no callback runs, including for a fetch that was already
    in flight.

    Args:
        notifications: resources.Notifications
        on_update: Called with the integer count
        interval: Seconds between polls; defaults to
            settings.BANTUIN_NOTIFICATION_POLL_INTERVAL
    """

    def __init__(self, notifications, on_update, interval=None):
        self.notifications = notifications
        self.on_update = on_update
        if interval is None:
            interval = settings.BANTUIN_NOTIFICATION_POLL_INTERVAL
        self.interval = interval
        self._stopped = threading.Event()
        self._lock = threading.RLock()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self._thread is not None:
            raise RuntimeError('Poller already started.')
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run,
            name='unread-count-poller',
            daemon=True,
        )
        self._thread.start()
        return self

    def _run(self):
        while not self._stopped.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Unread count poll raised, polling continues")
            if self._stopped.wait(self.interval):
                break

    def poll_once(self):
        """
        Fetch the count once and deliver it unless the poller was stopped.

        Returns:
            int or None: The delivered count
        """
        try:
            count = self.notifications.unread_count()
        except BantuinError as e:
            logger.warning(f"Unread count poll failed. Error: {e.message}")
            return None

        with self._lock:
            if self._stopped.is_set():
                logger.debug("Discarding unread count received after stop")
                return None
            self.on_update(count)
        return count

    def stop(self, timeout=STOP_TIMEOUT):
        with self._lock:
            self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()
        return False
