from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from warncord.configuration.escalation_config import EscalationConfig
from warncord.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()
DEFAULT_DB_PATH = Path("./data/violations.db")


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml``, exposes
    dictionary-like access helpers, and resolves the auto-punishment settings
    into an immutable :class:`EscalationConfig`. Uses fcntl file locks for safe
    concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping, ignoring it", self.config_path)
            return {}
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping.

        The returned dict is the internal cache. Callers should not mutate it;
        use get(...) or the provided convenience properties instead.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def escalation(self) -> EscalationConfig:
        """Return the ``escalation`` section as an :class:`EscalationConfig`.

        A missing or invalid section logs an error and yields the defaults,
        which keep the system in dry-run.
        """
        section = self._data.get("escalation", {})
        if not isinstance(section, dict):
            logger.error("[APP CONFIGURATION] 'escalation' must be a mapping, using defaults")
            return EscalationConfig()
        try:
            return EscalationConfig.from_mapping(section)
        except ValueError as exc:
            logger.error("[APP CONFIGURATION] %s; using defaults", exc)
            return EscalationConfig()

    @property
    def database_path(self) -> Path:
        """Return the SQLite path of the violation store (default ``./data/violations.db``)."""
        database = self._data.get("database", {})
        if isinstance(database, dict) and database.get("path"):
            return Path(str(database["path"])).resolve()
        return DEFAULT_DB_PATH.resolve()


def load_app_config(config_path: Path | None = None) -> AppConfig:
    """Create an :class:`AppConfig` for ``config_path`` (default ``./config/app_config.yml``)."""
    return AppConfig(config_path or CONFIG_PATH)
