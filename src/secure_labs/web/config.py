from dataclasses import dataclass, field
from pathlib import Path

from secure_labs.settings import DEFAULT_PORTS, Settings
from secure_labs.types import LabName


def default_base_dir() -> Path:
    return Path.cwd() / "files"


@dataclass
class LabConfig:
    """Configuration for a single lab service."""

    lab: LabName = LabName.CANONICALIZATION
    port: int = DEFAULT_PORTS[LabName.CANONICALIZATION]
    host: str = "127.0.0.1"
    base_dir: Path = field(default_factory=default_base_dir)
    insecure_demo: bool = False
    session_ttl: int = 3600

    @classmethod
    def from_settings(cls, settings: Settings, lab: LabName) -> "LabConfig":
        """Build the configuration for ``lab`` from loaded settings."""
        return cls(
            lab=lab,
            port=settings.port_for(lab),
            host=settings.host,
            base_dir=Path(settings.base_dir) if settings.base_dir else default_base_dir(),
            insecure_demo=settings.insecure_demo,
            session_ttl=settings.session_ttl,
        )
