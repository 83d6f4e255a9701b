"""
Configuration management for the North Star viewer.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

from .projection import PositionMode
from .resolver import ResolverPolicy


class ConfigError(ValueError):
    """Invalid configuration file or value."""


@dataclass
class ObserverConfig:
    """Fallback observer used when no location is available."""

    default_latitude: float = 40.0
    default_longitude: float = 0.0
    # Correct compass heading from magnetic to true north
    apply_magnetic_declination: bool = False


@dataclass
class TargetConfig:
    """Celestial target (Polaris, J2000)."""

    name: str = "Polaris"
    ra_degrees: float = 37.95456067
    dec_degrees: float = 89.264109


@dataclass
class ResolverConfig:
    """Sky position resolution."""

    policy: ResolverPolicy = ResolverPolicy.RIGOROUS
    heuristic_default_elevation: float = 40.0


@dataclass
class ProjectionConfig:
    """Screen and scene projection."""

    hfov: float = 60.0
    vfov: Optional[float] = None
    inclusive_edges: bool = True
    roll_compensation: bool = False
    sphere_radius: float = 30.0
    position_mode: PositionMode = PositionMode.CONTINUOUS


@dataclass
class SmoothingConfig:
    """Orientation smoothing filter."""

    enabled: bool = True
    alpha: float = 0.1
    wrap_heading: bool = True


@dataclass
class MorseConfig:
    """Signal sequencer timing and brightness levels."""

    dot_ms: int = 200
    on_brightness: float = 1.0
    off_brightness: float = 0.0
    idle_brightness: float = 1.0


@dataclass
class ServerConfig:
    """Static asset server."""

    root: Optional[Path] = None     # None serves the packaged assets
    host: str = "0.0.0.0"
    port: int = 3000
    https_port: int = 443
    ssl_dir: Path = field(default_factory=lambda: Path("ssl"))


_ENUM_FIELDS = {
    ("resolver", "policy"): ResolverPolicy,
    ("projection", "position_mode"): PositionMode,
}

_PATH_FIELDS = {
    ("server", "root"),
    ("server", "ssl_dir"),
}


@dataclass
class Config:
    """Main configuration container."""

    observer: ObserverConfig = field(default_factory=ObserverConfig)
    target: TargetConfig = field(default_factory=TargetConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    morse: MorseConfig = field(default_factory=MorseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
        return cls._from_dict(data or {})

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")

        config = cls()
        sections = {f.name: f for f in dataclasses.fields(cls) if f.name != "verbose"}

        for key, value in data.items():
            if key == "verbose":
                config.verbose = bool(value)
                continue
            if key not in sections:
                raise ConfigError(f"Unknown configuration section: {key}")
            if not isinstance(value, dict):
                raise ConfigError(f"Section {key} must be a mapping")

            section_cls = type(getattr(config, key))
            values = dict(value)
            for (section, name), enum_cls in _ENUM_FIELDS.items():
                if section == key and name in values:
                    try:
                        values[name] = enum_cls(values[name])
                    except ValueError as e:
                        raise ConfigError(f"{key}.{name}: {e}") from e
            for section, name in _PATH_FIELDS:
                if section == key and values.get(name) is not None:
                    values[name] = Path(values[name])

            try:
                setattr(config, key, section_cls(**values))
            except TypeError as e:
                raise ConfigError(f"Invalid keys in section {key}: {e}") from e

        return config

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""

        def convert(obj):
            if isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            if isinstance(obj, Enum):
                return obj.value
            if isinstance(obj, Path):
                return str(obj)
            return obj

        data = convert(dataclasses.asdict(self))
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
