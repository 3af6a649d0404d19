"""Advertisement rotation: which ad is on screen and for how long.

The engine only counts ticks; something else (see `Ticker`) calls `tick()`
once per second. It works from a snapshot of the playlist and never
touches the network, so playback continues while the server is unreachable.
"""

import logging
import random
import threading
from dataclasses import dataclass

from signage.errors import EmptyPlaylistError

logger = logging.getLogger(__name__)

ROTATION_TYPES = ("sequential", "random", "scheduled")


@dataclass(frozen=True)
class PlaylistAd:
    ad_id: str
    duration: int  # seconds
    name: str = ""
    media_url: str = ""
    media_type: str = "image"
    status: str = "active"

    @classmethod
    def from_dict(cls, data: dict) -> "PlaylistAd":
        return cls(
            ad_id=data["ad_id"],
            duration=max(1, int(data.get("duration") or 1)),
            name=data.get("name", ""),
            media_url=data.get("media_url", ""),
            media_type=data.get("media_type", "image"),
            status=data.get("status", "active"),
        )


class RotationEngine:
    """Round-robin or random rotation over the active ads of a playlist.

    Invariants while a playlist is loaded: `current_index` is in
    [0, len(playlist)) and 0 < `time_remaining` <= current ad duration.
    """

    def __init__(self, rotation_type: str = "sequential", rng: random.Random | None = None):
        self._lock = threading.RLock()
        self._rng = rng or random.Random()
        self.rotation_type = rotation_type
        self.playlist: list[PlaylistAd] = []
        self.current_index = 0
        self.time_remaining = 0

    @staticmethod
    def _eligible(ads: list[PlaylistAd]) -> list[PlaylistAd]:
        return [ad for ad in ads if ad.status == "active"]

    def _set_rotation(self, rotation_type: str | None) -> None:
        if rotation_type is None:
            return
        if rotation_type not in ROTATION_TYPES:
            logger.warning("Unknown rotation type %r, using sequential", rotation_type)
            rotation_type = "sequential"
        self.rotation_type = rotation_type

    def load_playlist(self, ads: list[PlaylistAd], rotation_type: str | None = None) -> PlaylistAd:
        """Start playing `ads` from the top. Raises EmptyPlaylistError if none is active."""
        eligible = self._eligible(ads)
        with self._lock:
            self._set_rotation(rotation_type)
            if not eligible:
                self.clear()
                raise EmptyPlaylistError("No active advertisements to play")
            self.playlist = eligible
            self.current_index = 0
            self.time_remaining = eligible[0].duration
            logger.info("Playlist loaded: %d ad(s), %s rotation", len(eligible), self.rotation_type)
            return eligible[0]

    def reload(self, ads: list[PlaylistAd], rotation_type: str | None = None) -> PlaylistAd:
        """Swap in a new playlist, keeping the current ad on screen if it survived."""
        eligible = self._eligible(ads)
        with self._lock:
            current = self.current_ad
            if current is None or not eligible:
                return self.load_playlist(ads, rotation_type)
            for index, ad in enumerate(eligible):
                if ad.ad_id == current.ad_id:
                    self._set_rotation(rotation_type)
                    self.playlist = eligible
                    self.current_index = index
                    self.time_remaining = min(self.time_remaining, ad.duration)
                    logger.info("Playlist reloaded, still showing %s", ad.ad_id)
                    return ad
            return self.load_playlist(ads, rotation_type)

    def clear(self) -> None:
        with self._lock:
            self.playlist = []
            self.current_index = 0
            self.time_remaining = 0

    @property
    def is_empty(self) -> bool:
        return not self.playlist

    @property
    def current_ad(self) -> PlaylistAd | None:
        with self._lock:
            if not self.playlist:
                return None
            return self.playlist[self.current_index]

    def tick(self) -> PlaylistAd | None:
        """Advance the clock by one second. Returns the ad now on screen."""
        with self._lock:
            if not self.playlist:
                return None
            self.time_remaining -= 1
            if self.time_remaining <= 0:
                self._advance()
            return self.playlist[self.current_index]

    def _advance(self) -> None:
        count = len(self.playlist)
        if self.rotation_type == "random":
            self.current_index = self._rng.randrange(count)
        else:
            # scheduled loops play in order until time windows exist
            self.current_index = (self.current_index + 1) % count
        self.time_remaining = self.playlist[self.current_index].duration

    def _step(self, offset: int) -> PlaylistAd | None:
        with self._lock:
            if not self.playlist:
                return None
            self.current_index = (self.current_index + offset) % len(self.playlist)
            self.time_remaining = self.playlist[self.current_index].duration
            return self.playlist[self.current_index]

    def next(self) -> PlaylistAd | None:
        """Operator skip forward; restarts the countdown."""
        return self._step(1)

    def previous(self) -> PlaylistAd | None:
        return self._step(-1)
