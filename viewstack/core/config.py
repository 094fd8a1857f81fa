"""Library configuration with clean, readable structure."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "viewstack.json"

DEFAULT_TAG = "div"
DEFAULT_PASSWORD_MASK = "******"


def config_path() -> Path:
    """
    Default config file location.

    $VIEWSTACK_CONFIG wins, then $XDG_CONFIG_HOME/viewstack, then
    ~/.config/viewstack.
    """
    explicit = os.environ.get("VIEWSTACK_CONFIG")
    if explicit:
        return Path(explicit)
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "viewstack" / CONFIG_FILENAME


@dataclass
class RegistryConfig:
    """Where YAML view definitions live and whether to hot-reload them."""
    paths: list[str] = field(default_factory=list)
    watch: bool = False

    def to_dict(self) -> dict:
        return {"paths": list(self.paths), "watch": self.watch}

    @classmethod
    def from_dict(cls, d: dict) -> "RegistryConfig":
        if not isinstance(d, dict):
            return cls()
        paths = d.get("paths", [])
        if isinstance(paths, str):
            # Single path shorthand: "paths": "views"
            paths = [paths]
        return cls(paths=[str(p) for p in paths], watch=bool(d.get("watch", False)))


@dataclass
class RenderConfig:
    """Markup rendering settings."""
    default_tag: str = DEFAULT_TAG
    password_mask: str = DEFAULT_PASSWORD_MASK
    escape: bool = True

    def to_dict(self) -> dict:
        return {
            "default_tag": self.default_tag,
            "password_mask": self.password_mask,
            "escape": self.escape,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "RenderConfig":
        if not isinstance(d, dict):
            return cls()
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in d.items() if k in known})


@dataclass
class ViewStackConfig:
    """Main configuration combining all sections."""
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    def to_dict(self) -> dict:
        return {
            "registry": self.registry.to_dict(),
            "render": self.render.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ViewStackConfig":
        return cls(
            registry=RegistryConfig.from_dict(d.get("registry", {})),
            render=RenderConfig.from_dict(d.get("render", {})),
        )

    def save(self, path: Optional[Path] = None):
        path = Path(path) if path else config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        temp = path.with_suffix(".tmp")
        temp.write_text(json.dumps(self.to_dict(), indent=2))
        temp.rename(path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ViewStackConfig":
        path = Path(path) if path else config_path()
        try:
            if path.exists():
                raw_data = json.loads(path.read_text())
                if isinstance(raw_data, dict):
                    return cls.from_dict(raw_data)
                logger.warning("Ignoring config %s: top level is not an object", path)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config %s: %s", path, e)
        return cls()


# Global instance
_config: Optional[ViewStackConfig] = None


def get_config() -> ViewStackConfig:
    """Get current config."""
    global _config
    if _config is None:
        _config = ViewStackConfig.load()
    return _config


def set_config(config: ViewStackConfig, persist: bool = False, path: Optional[Path] = None):
    """Set config, optionally saving it to path (default: config_path())."""
    global _config
    _config = config
    if persist:
        config.save(path)


def reset_config() -> None:
    """Drop the cached config (useful for tests)."""
    global _config
    _config = None
