"""Storage manager for lucide-picker configuration and the markup cache."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from lucide_picker.cache import WEEK_IN_SECONDS, FileMarkupCache, MarkupCache, MemoryMarkupCache
from lucide_picker.markup import DEFAULT_CDN_URL, MarkupResolver


@dataclass
class Config:
    """lucide-picker configuration."""

    catalog_path: Optional[str] = None  # None = bundled catalog
    sprite_url: Optional[str] = None  # None = bundled sprite
    cdn_url: str = DEFAULT_CDN_URL
    fetch_timeout: float = 5.0
    cache_ttl: int = WEEK_IN_SECONDS
    failure_ttl: int = 0
    cache_backend: str = "file"  # "file" or "memory"
    page_size: int = 100
    search_delay: float = 0.2
    scroll_delay: float = 0.1
    server_port: int = 9877

    def __post_init__(self) -> None:
        if not isinstance(self.page_size, int) or isinstance(self.page_size, bool) or self.page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {self.page_size!r}")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "catalog_path": self.catalog_path,
            "sprite_url": self.sprite_url,
            "cdn_url": self.cdn_url,
            "fetch_timeout": self.fetch_timeout,
            "cache_ttl": self.cache_ttl,
            "failure_ttl": self.failure_ttl,
            "cache_backend": self.cache_backend,
            "page_size": self.page_size,
            "search_delay": self.search_delay,
            "scroll_delay": self.scroll_delay,
            "server_port": self.server_port,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create from dictionary."""
        return cls(
            catalog_path=data.get("catalog_path"),
            sprite_url=data.get("sprite_url"),
            cdn_url=data.get("cdn_url", DEFAULT_CDN_URL),
            fetch_timeout=data.get("fetch_timeout", 5.0),
            cache_ttl=data.get("cache_ttl", WEEK_IN_SECONDS),
            failure_ttl=data.get("failure_ttl", 0),
            cache_backend=data.get("cache_backend", "file"),
            page_size=data.get("page_size", 100),
            search_delay=data.get("search_delay", 0.2),
            scroll_delay=data.get("scroll_delay", 0.1),
            server_port=data.get("server_port", 9877),
        )


class StorageManager:
    """Manages lucide-picker storage: config file and markup cache directory."""

    def __init__(self, base_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            base_dir: Base directory for storage. Defaults to ~/.lucide-picker
        """
        self.base_dir = base_dir or Path.home() / ".lucide-picker"
        self._config: Optional[Config] = None

    @property
    def config_path(self) -> Path:
        return self.base_dir / "config.yaml"

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "cache"

    def ensure_dirs(self) -> None:
        """Ensure storage directories exist."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> Config:
        """Load configuration from file."""
        if self._config is not None:
            return self._config

        if not self.config_path.exists():
            self._config = Config()
            return self._config

        try:
            data = yaml.safe_load(self.config_path.read_text()) or {}
            self._config = Config.from_dict(data)
        except (yaml.YAMLError, IOError, AttributeError, ValueError):
            self._config = Config()

        return self._config

    def save_config(self, config: Config) -> None:
        """Save configuration to file."""
        self.ensure_dirs()
        self.config_path.write_text(
            yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        )
        self._config = config

    def reset_config(self) -> Config:
        """Reset configuration to defaults."""
        config = Config()
        self.save_config(config)
        return config

    def build_cache(self) -> MarkupCache:
        """Create the markup store selected by cache_backend."""
        config = self.load_config()
        if config.cache_backend == "memory":
            return MemoryMarkupCache()
        return FileMarkupCache(self.cache_dir)

    def build_resolver(self) -> MarkupResolver:
        """Create a MarkupResolver wired to the configured cache and CDN."""
        config = self.load_config()
        return MarkupResolver(
            cache=self.build_cache(),
            cdn_url=config.cdn_url,
            timeout=config.fetch_timeout,
            cache_ttl=config.cache_ttl,
            failure_ttl=config.failure_ttl,
        )

    def get_catalog_source(self):
        """Configured catalog path, or the bundled catalog JSON text."""
        config = self.load_config()
        if config.catalog_path:
            return Path(config.catalog_path).expanduser()
        from lucide_picker.resources import get_default_catalog_json
        return get_default_catalog_json()

    def get_sprite_location(self) -> str:
        """Configured sprite URL/path, or the bundled sprite file."""
        config = self.load_config()
        if config.sprite_url:
            return config.sprite_url
        from lucide_picker.resources import get_default_sprite_path
        return str(get_default_sprite_path())
