"""
Configuration management for magbot.

Two layers are combined here:

1. ``Settings`` -- process settings from environment variables
   (prefixed MAGBOT_) or a .env file, via pydantic-settings.
2. The user configuration file (YAML, ``~/.magbot/config.yaml`` by
   default) listing magazines and output directories. Lookups fall
   back to built-in defaults for any key the user file lacks.

The configuration is loaded once at startup into a ``Configuration``
value that is passed explicitly to every component.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from magbot import catalog
from magbot.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".magbot"
CONFIG_PATH = CONFIG_DIR / "config.yaml"
LOG_PATH = CONFIG_DIR / "magbot.log"

FEED_BASE_URL = "http://www.jw.org/apps/index.xjp"
FILE_BASE_URL = "http://download.jw.org/files/media_magazines"

DEFAULT_CHECK_INTERVAL = 6 * 60 * 60  # seconds

DEFAULT_CONFIG: Dict[str, Any] = {
    "mags": {
        "w": {"E": ["PDF", "MP3"]},
        "wp": {"E": ["PDF"]},
        "g": {"E": ["PDF"]},
    },
    "dir": {
        "audio": str(Path.home() / "Music" / "magazines"),
        "pub": str(Path.home() / "Documents" / "magazines"),
    },
    "check-interval": DEFAULT_CHECK_INTERVAL,
}

_MISSING = object()


class Settings(BaseSettings):
    """
    Process settings with environment variable support.

    Example:
        export MAGBOT_CONFIG_PATH="/srv/magbot/config.yaml"
        export MAGBOT_NOTIFY=false
    """

    model_config = SettingsConfigDict(
        env_prefix="MAGBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    config_path: Path = Field(
        default=CONFIG_PATH,
        description="Path to the YAML configuration file"
    )
    log_path: Path = Field(
        default=LOG_PATH,
        description="Append-only log file"
    )
    feed_base_url: str = Field(
        default=FEED_BASE_URL,
        description="Endpoint that lists a magazine feed"
    )
    file_base_url: str = Field(
        default=FILE_BASE_URL,
        description="Endpoint that serves single issue files"
    )
    request_timeout: float = Field(
        default=60.0,
        description="HTTP timeout in seconds"
    )
    notify: bool = Field(
        default=True,
        description="Send desktop notifications"
    )


def write_default_config(path: Path) -> None:
    """
    Write the built-in defaults to ``path``, creating parent directories.

    Raises:
        ConfigError: If the directory or file cannot be created
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
    except OSError as exc:
        raise ConfigError(
            f"Cannot create configuration file {path}: {exc}",
            suggestion="check permissions or set MAGBOT_CONFIG_PATH",
        ) from exc
    logger.info("Wrote default configuration to %s", path)


def load_user_config(path: Path) -> Dict[str, Any]:
    """
    Load the user configuration file, creating it from defaults if absent.

    Args:
        path: Location of the YAML configuration file

    Returns:
        The parsed mapping (empty dict for an empty file)

    Raises:
        ConfigError: If the file cannot be created, read or is not a mapping
    """
    path = Path(path).expanduser()
    if not path.exists():
        write_default_config(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file {path} must contain a mapping, got {type(data).__name__}"
        )
    return data


class Configuration:
    """
    Active configuration: user file values layered over built-in defaults.

    Attributes:
        data: Mapping loaded from the user configuration file
        defaults: Built-in default mapping
        settings: Process settings
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        settings: Optional[Settings] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.data = data or {}
        self.settings = settings or Settings()
        self.defaults = defaults if defaults is not None else copy.deepcopy(DEFAULT_CONFIG)

    def resolve(self, path: Union[str, Sequence[str]], default: Any = _MISSING) -> Any:
        """
        Look up a nested key, falling back to defaults at each level.

        The walk follows the user mapping while it has each key; from the
        first missing key onward it continues in the defaults.

        Args:
            path: Dotted string ("dir.audio") or sequence of keys
            default: Value returned when neither mapping has the key

        Returns:
            The resolved value

        Raises:
            ConfigError: If the key is missing and no default was given

        Example:
            >>> config.resolve("dir.pub")
            '/home/me/Documents/magazines'
        """
        keys = path.split(".") if isinstance(path, str) else list(path)

        user_node: Any = self.data
        default_node: Any = self.defaults
        for key in keys:
            if isinstance(user_node, dict) and key in user_node:
                user_node = user_node[key]
                default_node = default_node.get(key) if isinstance(default_node, dict) else None
            elif isinstance(default_node, dict) and key in default_node:
                user_node = None
                default_node = default_node[key]
            else:
                if default is not _MISSING:
                    return default
                raise ConfigError(f"Configuration key '{'.'.join(keys)}' is not set")

        return user_node if user_node is not None else default_node

    def selector_specs(self) -> List[Tuple[str, str, str]]:
        """
        List configured (code, language, format) triples in file order.

        Raises:
            ConfigError: If the ``mags`` section is malformed
        """
        mags = self.resolve("mags")
        if not isinstance(mags, dict):
            raise ConfigError("'mags' must map magazine codes to languages")

        specs: List[Tuple[str, str, str]] = []
        for code, languages in mags.items():
            if not isinstance(languages, dict):
                raise ConfigError(f"'mags.{code}' must map languages to format lists")
            for language, formats in languages.items():
                if isinstance(formats, str):
                    formats = [formats]
                for fmt in formats or []:
                    specs.append((str(code), str(language), str(fmt)))
        return specs

    @property
    def check_interval(self) -> int:
        """Seconds between runs in daemon mode."""
        value = self.resolve("check-interval", DEFAULT_CHECK_INTERVAL)
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"'check-interval' must be a number of seconds, got {value!r}") from None
        if seconds <= 0:
            raise ConfigError(f"'check-interval' must be positive, got {seconds}")
        return seconds

    def root_dir(self, format_or_selector: Any) -> Path:
        """
        Resolve the output root directory for a format or selector.

        The format's kind selects ``dir.audio`` or ``dir.pub``. A value of
        the form ``[primary, fallback]`` resolves to the primary when it
        exists right now, otherwise to the fallback.

        Args:
            format_or_selector: Format name or an object with a ``format``

        Returns:
            Root directory path (user home expanded)

        Raises:
            ConfigError: If the format is unknown or the kind has no directory
        """
        fmt = getattr(format_or_selector, "format", format_or_selector)
        kind = catalog.kind_of(fmt)

        value = self.resolve(("dir", kind.value), None)
        if not value:
            raise ConfigError(
                f"No directory configured for {kind.value} files",
                suggestion=f"add 'dir: {{{kind.value}: <path>}}' to {self.settings.config_path}",
            )

        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ConfigError(
                    f"'dir.{kind.value}' must be a path or a [primary, fallback] pair"
                )
            primary, fallback = (Path(str(v)).expanduser() for v in value)
            if primary.exists():
                return primary
            logger.debug("Primary %s directory %s missing, using %s", kind.value, primary, fallback)
            return fallback

        return Path(str(value)).expanduser()


def get_config(settings: Optional[Settings] = None) -> Configuration:
    """
    Load the application configuration.

    Reads (or on first run creates) the user configuration file named by
    the settings and layers it over the built-in defaults.

    Returns:
        Configuration: Application configuration
    """
    settings = settings or Settings()
    data = load_user_config(settings.config_path)
    return Configuration(data=data, settings=settings)
