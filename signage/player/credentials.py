"""Locally held display credentials."""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    display_id: str
    connection_token: str


class CredentialStore:
    """JSON file with the display id and connection token."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Credentials | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            return Credentials(display_id=data["display_id"], connection_token=data["connection_token"])
        except (ValueError, KeyError) as e:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.path, e)
            return None

    def save(self, credentials: Credentials) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(credentials)))
        self.path.chmod(0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
