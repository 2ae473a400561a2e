"""Connectivity observer: holds the last known network status and pushes changes to subscribers."""

import threading
from typing import Callable, List

import requests

from weather_view.domain import ConnectivityStatus
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="connectivity")

OFFLINE_NOTICE = "No internet connection !"

session = requests.Session()

Listener = Callable[[ConnectivityStatus], None]


class ConnectivityMonitor:
    """Thread-safe status holder; listeners run on the thread that reports the change."""

    def __init__(self, initial: ConnectivityStatus = ConnectivityStatus.ONLINE, probe_url: str | None = None,
                 timeout: float = 3.0) -> None:
        self._status = initial
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self.probe_url = probe_url
        self.timeout = timeout

    @property
    def status(self) -> ConnectivityStatus:
        with self._lock:
            return self._status

    @property
    def is_offline(self) -> bool:
        return self.status is ConnectivityStatus.OFFLINE

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def set_status(self, status: ConnectivityStatus) -> None:
        """Record ``status`` and notify listeners if it changed."""
        with self._lock:
            changed = status is not self._status
            self._status = status
            listeners = list(self._listeners)
        if not changed:
            return

        if status is ConnectivityStatus.OFFLINE:
            logger.warning(OFFLINE_NOTICE)
        else:
            logger.info("Connectivity restored")
        for listener in listeners:
            listener(status)

    def probe(self) -> ConnectivityStatus:
        """Refresh the status with a HEAD request to ``probe_url``."""
        if not self.probe_url:
            return self.status
        try:
            session.head(self.probe_url, timeout=self.timeout, allow_redirects=True)
            status = ConnectivityStatus.ONLINE
        except requests.RequestException as exc:
            logger.debug("Connectivity probe failed", extra={"url": self.probe_url, "error": str(exc)})
            status = ConnectivityStatus.OFFLINE
        self.set_status(status)
        return status
