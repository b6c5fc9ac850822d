"""Local configuration management for the notekeep CLI."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_SERVER_URL = "http://localhost:5000"


def default_config_dir() -> Path:
    """~/.notekeep unless NOTEKEEP_HOME points elsewhere."""
    override = os.getenv("NOTEKEEP_HOME")
    return Path(override) if override else Path.home() / ".notekeep"


@dataclass
class LocalConfig:
    """Local configuration stored in ~/.notekeep/config.json."""

    config_dir: Path = field(default_factory=default_config_dir)
    server_url: str = DEFAULT_SERVER_URL
    email: Optional[str] = None
    token: Optional[str] = None
    # Set between signup/signin and passcode verification
    pending_user_id: Optional[str] = None
    pending_flow: Optional[str] = None

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "LocalConfig":
        """Load configuration from disk."""
        config = cls(config_dir=config_dir) if config_dir else cls()
        if config.config_file.exists():
            try:
                data = json.loads(config.config_file.read_text())
                config.server_url = data.get("server_url") or DEFAULT_SERVER_URL
                config.email = data.get("email")
                config.token = data.get("token")
                config.pending_user_id = data.get("pending_user_id")
                config.pending_flow = data.get("pending_flow")
            except (json.JSONDecodeError, OSError):
                pass
        return config

    def is_logged_in(self) -> bool:
        """Check if user is logged in."""
        return bool(self.email and self.token)

    def save(self) -> None:
        """Write configuration to disk with secure permissions."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        data = {"server_url": self.server_url}
        for key in ("email", "token", "pending_user_id", "pending_flow"):
            value = getattr(self, key)
            if value:
                data[key] = value
        self.config_file.write_text(json.dumps(data))
        # Owner read/write only
        os.chmod(self.config_file, 0o600)

    def set_pending(self, user_id: str, flow: str, email: str) -> None:
        """Remember a passcode flow waiting for verification."""
        self.pending_user_id = user_id
        self.pending_flow = flow
        self.email = email
        self.save()

    def save_session(self, email: str, token: str) -> None:
        """Store a session token and drop any pending flow."""
        self.email = email
        self.token = token
        self.pending_user_id = None
        self.pending_flow = None
        self.save()

    def clear(self) -> None:
        """Clear saved credentials, keeping the server URL."""
        self.email = None
        self.token = None
        self.pending_user_id = None
        self.pending_flow = None
        self.save()
