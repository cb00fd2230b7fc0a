"""
hls-relay configuration handling.

Provides YAML configuration loading, environment overrides and validation.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

import yaml

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_CACHE_TTL = 18000  # 5 hours, long enough for a watch party
DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
DEFAULT_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
# httpx logs every request at INFO; segment traffic would drown the log.
DEFAULT_LOGGER_LEVELS = {"httpx": "WARNING", "httpcore": "WARNING"}


def _split_origins(value: Any) -> List[str]:
    if isinstance(value, str):
        return [o.strip() for o in value.split(",") if o.strip()]
    return list(value or [])


@dataclass
class RelayConfig:
    """
    hls-relay configuration.

    Can be loaded from a YAML file, overridden from the environment, or
    created programmatically.
    """
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    static_dir: str = ""

    # Upstream fetches
    referer_url: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    # Cache
    cache_ttl: int = DEFAULT_CACHE_TTL

    # Resolver
    watch_url: str = DEFAULT_WATCH_URL
    format_sort: List[str] = field(default_factory=lambda: ["proto:m3u8"])

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = DEFAULT_LOG_FORMAT
    log_max_bytes: int = 10485760  # 10MB
    log_backup_count: int = 3
    logger_levels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LOGGER_LEVELS))

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.cache_ttl <= 0:
            raise ValueError("cache_ttl must be greater than 0")
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be greater than 0")
        if self.referer_url:
            parts = urlsplit(self.referer_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ValueError(
                    f"referer_url must be an absolute http(s) URL, got {self.referer_url!r}"
                )
        if "{video_id}" not in self.watch_url:
            raise ValueError("watch_url must contain a {video_id} placeholder")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        for name, level in self.logger_levels.items():
            if str(level).upper() not in LOG_LEVELS:
                raise ValueError(f"logging.loggers.{name}: unknown level {level!r}")

    @classmethod
    def load(cls, path: str) -> "RelayConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            RelayConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config file is invalid YAML
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelayConfig":
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary with optional ``server``,
                ``upstream``, ``cache``, ``resolver`` and ``logging`` sections

        Returns:
            RelayConfig instance
        """
        server_cfg = data.get("server", {})
        upstream_cfg = data.get("upstream", {})
        cache_cfg = data.get("cache", {})
        resolver_cfg = data.get("resolver", {})
        logging_cfg = data.get("logging", {})

        return cls(
            host=server_cfg.get("host", "0.0.0.0"),
            port=int(server_cfg.get("port", 3000)),
            allowed_origins=_split_origins(server_cfg.get("allowed_origins", ["*"])),
            static_dir=server_cfg.get("static_dir", ""),
            referer_url=upstream_cfg.get("referer_url", "") or "",
            user_agent=upstream_cfg.get("user_agent", DEFAULT_USER_AGENT),
            fetch_timeout=float(upstream_cfg.get("timeout", DEFAULT_FETCH_TIMEOUT)),
            cache_ttl=int(cache_cfg.get("ttl", DEFAULT_CACHE_TTL)),
            watch_url=resolver_cfg.get("watch_url", DEFAULT_WATCH_URL),
            format_sort=list(resolver_cfg.get("format_sort", ["proto:m3u8"])),
            log_level=logging_cfg.get("level", "INFO"),
            log_file=logging_cfg.get("file", ""),
            log_format=logging_cfg.get("format", DEFAULT_LOG_FORMAT),
            log_max_bytes=logging_cfg.get("max_bytes", 10485760),
            log_backup_count=logging_cfg.get("backup_count", 3),
            logger_levels=dict(logging_cfg.get("loggers", DEFAULT_LOGGER_LEVELS)),
        )

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Return a copy with environment overrides applied.

        Recognized variables: PORT, ALLOWED_ORIGINS (comma separated),
        REFERER_URL, HLS_RELAY_LOG_LEVEL.
        """
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        if env.get("PORT"):
            overrides["port"] = int(env["PORT"])
        if env.get("ALLOWED_ORIGINS"):
            overrides["allowed_origins"] = _split_origins(env["ALLOWED_ORIGINS"])
        if "REFERER_URL" in env:
            overrides["referer_url"] = env["REFERER_URL"]
        if env.get("HLS_RELAY_LOG_LEVEL"):
            overrides["log_level"] = env["HLS_RELAY_LOG_LEVEL"]
        return replace(self, **overrides) if overrides else self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Defaults plus environment overrides."""
        return cls().with_env(environ)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Configuration as dictionary
        """
        return {
            "server": {
                "host": self.host,
                "port": self.port,
                "allowed_origins": list(self.allowed_origins),
                "static_dir": self.static_dir,
            },
            "upstream": {
                "referer_url": self.referer_url,
                "user_agent": self.user_agent,
                "timeout": self.fetch_timeout,
            },
            "cache": {
                "ttl": self.cache_ttl,
            },
            "resolver": {
                "watch_url": self.watch_url,
                "format_sort": list(self.format_sort),
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
                "format": self.log_format,
                "max_bytes": self.log_max_bytes,
                "backup_count": self.log_backup_count,
                "loggers": dict(self.logger_levels),
            },
        }

    def save(self, path: str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to save the configuration file
        """
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)
