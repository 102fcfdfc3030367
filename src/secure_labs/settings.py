import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from secure_labs.types import LabName

logger = logging.getLogger(__name__)

DEFAULT_PORTS: dict[LabName, int] = {
    LabName.CANONICALIZATION: 4000,
    LabName.AUTH: 3001,
    LabName.ACCESS_CONTROL: 3000,
}


def default_settings_path() -> Path:
    return Path.home() / ".secure-labs" / "config.yml"


class Settings(BaseModel):
    host: str = "127.0.0.1"
    base_dir: str | None = None
    insecure_demo: bool = False
    session_ttl: int = 3600  # seconds
    ports: dict[LabName, int] = Field(default_factory=lambda: dict(DEFAULT_PORTS))

    def port_for(self, lab: LabName) -> int:
        """Get the port for a lab, honouring the PORT environment variable."""
        env_port = os.environ.get("PORT")
        if env_port:
            try:
                return int(env_port)
            except ValueError:
                logger.warning(f"Ignoring non-numeric PORT value: {env_port!r}")
        return self.ports.get(lab, DEFAULT_PORTS[lab])


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults."""
    if config_file is None:
        config_file = default_settings_path()
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        section = data.get("settings") or {}
        if not isinstance(section, dict):
            logger.error(f"Ignoring settings in {config_file}: expected a mapping, got {type(section).__name__}")
            return Settings()
        return Settings(**section)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse settings file: {e}")
        return Settings()
    except ValidationError as e:
        logger.error(f"Invalid settings in {config_file}: {e}")
        return Settings()
    except (OSError, AttributeError, TypeError) as e:
        logger.error(f"Unable to read settings file {config_file}: {e}")
        return Settings()
