# ======================================================================
#  Config Service - Configuration loading and caching
#  - Loads config from built-in defaults, YAML files and env vars
#  - Caches composed config
#  - Builds the WeaveConfig handed to the weave workflow
# ======================================================================

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from loomwork.helpers.dto.weave_dto import DEFAULT_MANIFEST_PATH, WeaveConfig

# ======================================================================
# Config file locations
# ======================================================================
SYSTEM_CONFIG_PATH = "/etc/loomwork/config.yaml"
LOCAL_CONFIG_NAME = "loomwork.yaml"
CONFIG_PATH_ENV = "LOOMWORK_CONFIG"
ENV_PREFIX = "LOOMWORK_"


class ConfigService:
    """
    Service for loading and caching loomwork configuration.

    Loads config from multiple sources (defaults → YAML → overrides → env),
    caches the result, and provides reload capability.
    """

    def __init__(self, overrides: dict[str, Any] | None = None) -> None:
        """Initialize ConfigService with empty cache."""
        self._config: dict[str, Any] | None = None
        self._overrides = dict(overrides or {})
        self._logger = logging.getLogger(__name__)

    def get_config(self, force_reload: bool = False) -> dict[str, Any]:
        """
        Get the composed configuration.

        Args:
            force_reload: If True, bypass cache and reload from sources

        Returns:
            Complete configuration dict
        """
        if self._config is None or force_reload:
            self._config = self._compose(self._overrides)
        return self._config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dotted path.

        Example:
            >>> service.get("weave.max_workers")
            1
            >>> service.get("weave.missing", 3)
            3
        """
        node: Any = self.get_config()
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def reload(self) -> dict[str, Any]:
        """Force reload configuration from all sources."""
        self._logger.info("[config] Reloading configuration from all sources")
        return self.get_config(force_reload=True)

    def build_weave_config(self, **overrides: Any) -> WeaveConfig:
        """
        Build the WeaveConfig for one run.

        Keyword overrides (typically CLI flags) win over every config source;
        None values are ignored so unset flags fall through to the config.
        """
        weave = dict(self.get("weave", {}) or {})
        weave.update({k: v for k, v in overrides.items() if v is not None})

        workspace_root = Path(weave.get("workspace_root") or ".").expanduser()
        template_dirs = weave.get("template_dirs") or []
        if isinstance(template_dirs, str):
            template_dirs = [d for d in template_dirs.split(os.pathsep) if d]
        resolved_dirs = [
            d if d.is_absolute() else workspace_root / d for d in (Path(t).expanduser() for t in template_dirs)
        ]

        return WeaveConfig(
            workspace_root=workspace_root,
            package_filter=str(weave["package_filter"]) if weave.get("package_filter") else None,
            verbose=bool(weave.get("verbose", False)),
            max_workers=int(weave.get("max_workers", 1)),
            template_dirs=resolved_dirs,
            manifest_path=str(weave.get("manifest_path") or DEFAULT_MANIFEST_PATH),
            dry_run=bool(weave.get("dry_run", False)),
        )

    # ----------------------------------------------------------------------
    # Private composition logic
    # ----------------------------------------------------------------------

    def _compose(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Load final configuration from:
          1) Built-in defaults
          2) /etc/loomwork/config.yaml  (if present)
          3) ./loomwork.yaml  (if present)
          4) $LOOMWORK_CONFIG (if set)
          5) overrides dict passed in
          6) Environment variables (LOOMWORK_*)

        Returns merged config as dict.
        """
        cfg = self._default_config()

        self._deep_merge(cfg, self._load_yaml(SYSTEM_CONFIG_PATH))
        self._deep_merge(cfg, self._load_yaml(os.path.join(os.getcwd(), LOCAL_CONFIG_NAME)))

        env_path = os.getenv(CONFIG_PATH_ENV)
        if env_path:
            self._deep_merge(cfg, self._load_yaml(env_path))

        if overrides:
            self._deep_merge(cfg, overrides)

        self._apply_env_overrides(cfg)

        self._logger.debug(f"[config] Composed config; keys: {list(cfg.keys())}")
        return cfg

    def _default_config(self) -> dict[str, Any]:
        """Base defaults for user-configurable settings."""
        return {
            "weave": {
                "workspace_root": ".",
                "package_filter": None,
                "verbose": False,
                "max_workers": 1,  # >1 runs tasks in a thread pool
                "template_dirs": ["templates"],
                "manifest_path": DEFAULT_MANIFEST_PATH,
                "dry_run": False,
            },
        }

    def _deep_merge(self, a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
        """
        Recursively merge dict b into dict a (mutates a, returns it).
        """
        for k, v in b.items():
            if isinstance(v, dict) and isinstance(a.get(k), dict):
                self._deep_merge(a[k], v)
            else:
                a[k] = v
        return a

    def _load_yaml(self, path: str) -> dict[str, Any]:
        """
        Load a YAML file; returns {} if not found or not a mapping.
        """
        if not path or not os.path.exists(path):
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning(f"[config] Ignoring unreadable config {path}: {e}")
            return {}
        if not isinstance(data, dict):
            self._logger.warning(f"[config] Ignoring {path}: top level is not a mapping")
            return {}
        return data

    def _apply_env_overrides(self, cfg: dict[str, Any]) -> None:
        """
        Support environment overrides for the weave settings.

        Supported formats:
          LOOMWORK_WORKSPACE_ROOT=/src/app
          LOOMWORK_PACKAGE_FILTER=android
          LOOMWORK_VERBOSE=true
          LOOMWORK_MAX_WORKERS=4
          LOOMWORK_TEMPLATE_DIRS=templates:/shared/templates
          LOOMWORK_MANIFEST_PATH=.loomwork/blocks.json
          LOOMWORK_DRY_RUN=true

        LOOMWORK_CONFIG names a config file and is not a setting.
        """
        allowed = set(self._default_config()["weave"])
        weave = cfg.setdefault("weave", {})
        for k, v in os.environ.items():
            if not k.startswith(ENV_PREFIX) or k == CONFIG_PATH_ENV:
                continue
            key = k[len(ENV_PREFIX) :].lower()
            if key not in allowed:
                self._logger.debug(f"[config] Ignoring unknown environment override: {k}")
                continue
            weave[key] = _parse_env_value(v)


def _parse_env_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value
