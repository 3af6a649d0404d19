"""Display device lifecycle: registration, approval wait, playback, exit.

    unregistered --register--> pending --approved--> playing | no_content
                                       --rejected--> rejected
    any --exit--> unregistered (credentials cleared)

Playback runs on three independent tickers: ad advance, heartbeat and
refresh polling. Network failures in the latter two are logged and
ignored; the ad-advance ticker never touches the network.
"""

import logging
import threading
from enum import Enum
from typing import Callable

import requests

from signage.errors import EmptyPlaylistError
from signage.player.api_client import DisplayApiClient, DisplayApiError
from signage.player.config import PlayerSettings
from signage.player.credentials import CredentialStore, Credentials
from signage.player.rotation import PlaylistAd, RotationEngine
from signage.player.ticker import Ticker

logger = logging.getLogger(__name__)

NETWORK_ERRORS = (requests.RequestException, DisplayApiError)


class DeviceState(Enum):
    UNREGISTERED = "unregistered"
    PENDING = "pending"
    REJECTED = "rejected"
    PLAYING = "playing"
    NO_CONTENT = "no_content"


class DisplayDevice:
    def __init__(
        self,
        settings: PlayerSettings,
        api: DisplayApiClient | None = None,
        store: CredentialStore | None = None,
        engine: RotationEngine | None = None,
        on_ad_changed: Callable[[PlaylistAd | None], None] | None = None,
    ):
        self.settings = settings
        self.api = api or DisplayApiClient(settings.server_url, timeout=settings.request_timeout)
        self.store = store or CredentialStore(settings.credentials_file)
        self.engine = engine or RotationEngine()
        self._on_ad_changed = on_ad_changed

        self.credentials: Credentials | None = self.store.load()
        self.state = DeviceState.PENDING if self.credentials else DeviceState.UNREGISTERED
        self.rejection_reason: str | None = None
        self._shown_ad_id: str | None = None
        self._stop_polling = threading.Event()

        self._tickers = [
            Ticker("advance", settings.tick_interval, self.on_tick),
            Ticker("heartbeat", settings.heartbeat_interval, self.send_heartbeat),
            Ticker("refresh", settings.refresh_interval, self.check_refresh),
        ]

    # --- Registration ---

    def register(self, display_name: str, location: str, **kwargs) -> Credentials:
        result = self.api.register(display_name, location, **kwargs)
        self._store_credentials(result["display_id"], result["connection_token"])
        self.state = DeviceState.PENDING
        logger.info("Registered as %s, waiting for approval", result["display_id"])
        return self.credentials

    def login(self, display_id: str, password: str) -> Credentials:
        result = self.api.login(display_id, password)
        self._store_credentials(result["display_id"], result["connection_token"])
        self.state = DeviceState.PENDING
        return self.credentials

    def _store_credentials(self, display_id: str, connection_token: str) -> None:
        self.credentials = Credentials(display_id=display_id, connection_token=connection_token)
        self.store.save(self.credentials)

    # --- Approval ---

    def check_approval(self) -> DeviceState:
        """Poll once. Leaves state unchanged if the server cannot be reached."""
        if not self.credentials:
            return self.state
        try:
            status = self.api.poll_status(self.credentials.connection_token)
        except NETWORK_ERRORS as e:
            logger.warning("Approval poll failed: %s", e)
            return self.state

        if status.get("connection_request_status") == "rejected":
            self.rejection_reason = status.get("rejection_reason")
            self.state = DeviceState.REJECTED
            logger.info("Registration rejected: %s", self.rejection_reason or "no reason given")
        elif status.get("assigned_admin"):
            if self.state in (DeviceState.UNREGISTERED, DeviceState.PENDING, DeviceState.REJECTED):
                logger.info("Display %s approved", self.credentials.display_id)
                self.state = DeviceState.NO_CONTENT
        else:
            self.state = DeviceState.PENDING
        return self.state

    def wait_for_approval(self) -> DeviceState:
        """Poll until the request is resolved or `stop_waiting()` is called."""
        self._stop_polling.clear()
        while self.check_approval() == DeviceState.PENDING:
            if self._stop_polling.wait(self.settings.poll_interval):
                break
        return self.state

    def stop_waiting(self) -> None:
        self._stop_polling.set()

    # --- Playback ---

    @property
    def is_approved(self) -> bool:
        return self.state in (DeviceState.PLAYING, DeviceState.NO_CONTENT)

    def load_playlist(self) -> bool:
        """Fetch the current loop and hand it to the engine.

        On network failure the previous playlist keeps playing. Returns True
        if something is playing afterwards.
        """
        try:
            data = self.api.fetch_playlist(self.credentials.connection_token)
        except NETWORK_ERRORS as e:
            logger.warning("Playlist fetch failed, keeping current playlist: %s", e)
            return not self.engine.is_empty

        ads = [PlaylistAd.from_dict(ad) for ad in data.get("advertisements", [])]
        rotation_type = (data.get("loop") or {}).get("rotation_type")
        try:
            if self.engine.is_empty:
                self.engine.load_playlist(ads, rotation_type)
            else:
                self.engine.reload(ads, rotation_type)
        except EmptyPlaylistError:
            logger.info("No content to show")
            self.state = DeviceState.NO_CONTENT
            self._notify()
            return False

        self.state = DeviceState.PLAYING
        self._notify()
        return True

    def activate(self) -> None:
        """Start playback. Only valid once approved."""
        if not self.is_approved:
            raise RuntimeError(f"Cannot start playback in state {self.state.value}")
        self.load_playlist()
        self.send_heartbeat()
        for ticker in self._tickers:
            ticker.start()
        logger.info("Playback started for %s", self.credentials.display_id)

    def on_tick(self) -> None:
        if self.state != DeviceState.PLAYING:
            return
        self.engine.tick()
        self._notify()

    def send_heartbeat(self) -> None:
        if not self.credentials:
            return
        current = self.engine.current_ad
        try:
            self.api.report_status(
                self.credentials.connection_token,
                "online",
                current.ad_id if current else None,
            )
        except NETWORK_ERRORS as e:
            logger.warning("Heartbeat failed: %s", e)

    def check_refresh(self) -> None:
        if not self.credentials:
            return
        try:
            should_refresh = self.api.check_refresh(self.credentials.connection_token)
        except NETWORK_ERRORS as e:
            logger.debug("Refresh check failed: %s", e)
            return
        if should_refresh:
            logger.info("Refresh requested by server, reloading playlist")
            self.load_playlist()

    def _notify(self) -> None:
        current = self.engine.current_ad
        current_id = current.ad_id if current else None
        if current_id == self._shown_ad_id:
            return
        self._shown_ad_id = current_id
        if current:
            logger.info("Now showing %s (%ss)", current.ad_id, current.duration)
        if self._on_ad_changed:
            self._on_ad_changed(current)

    # --- Exit ---

    def exit(self) -> None:
        """Tear down playback, forget credentials, return to unregistered."""
        self.stop_waiting()
        for ticker in self._tickers:
            ticker.stop()
        self.engine.clear()
        self.store.clear()
        self.credentials = None
        self.rejection_reason = None
        self._shown_ad_id = None
        self.state = DeviceState.UNREGISTERED
        logger.info("Display exited; credentials cleared")
