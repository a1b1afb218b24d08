"""Configuration management for the YAML config file."""

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import KINDS, normalize_kind
from .paths import get_bundled_catalog_dir, get_data_dir, get_system_path, resolve_data_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = get_data_dir() / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
_TEMPLATE_CONFIG = get_system_path("config", "config.yaml")

_DEFAULT_CONFIG_TEMPLATE = """# Auto-generated default configuration for reviewr-templates
catalog:
  include_bundled: true
  paths: []

install:
  target_dir: ".reviewr"
  overwrite: false

validation:
  required_fields:
    skills: ["language", "framework"]
  strict: false

detection:
  max_depth: 4
  ignore_dirs: ["node_modules", ".git", ".venv", "venv", "dist", "build", "__pycache__"]
  min_score: 1

remotes: {}

checklist:
  template: "checklist_template.md"
"""

BASE_REQUIRED_FIELDS = ["name", "displayName", "version", "description", "category"]


def _write_template(path: Path, content: str) -> None:
    """Write templated YAML content to disk with a trailing newline."""
    path.write_text(content.strip() + "\n", encoding="utf-8")


class ConfigManager:
    """Manages loading and validation of the YAML configuration file."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the manager and ensure a baseline config file exists."""
        path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        if not path.is_absolute():
            path = path.resolve()
        self.config_path = str(path)
        self.base_dir = str(path.parent)
        self._config = None
        self._ensure_default_config()

    def load_config(self) -> Dict[str, Any]:
        """Load the main configuration file."""
        if self._config is None:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info("Loaded configuration from %s", self.config_path)
            except Exception as e:
                logger.error("Failed to load config from %s: %s", self.config_path, e)
                raise

        return self._config

    def _ensure_default_config(self) -> None:
        """Create the default configuration file if it is missing."""
        config_file = Path(self.config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        if config_file.exists():
            return

        if _TEMPLATE_CONFIG.exists():
            try:
                shutil.copyfile(_TEMPLATE_CONFIG, config_file)
                logger.info("Created default config.yaml at %s", config_file)
                return
            except OSError as exc:
                logger.warning("Failed to copy template config: %s", exc)

        _write_template(config_file, _DEFAULT_CONFIG_TEMPLATE)
        logger.info("Created fallback default config.yaml at %s", config_file)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.load_config().get(name) or {}
        return section if isinstance(section, dict) else {}

    def get_catalog_dirs(self) -> List[Path]:
        """Return catalog roots in lookup order; later roots override earlier ones."""
        catalog_cfg = self._section('catalog')
        roots: List[Path] = []
        if catalog_cfg.get('include_bundled', True):
            roots.append(get_bundled_catalog_dir())
        for entry in catalog_cfg.get('paths') or []:
            candidate = Path(str(entry)).expanduser()
            if not candidate.is_absolute():
                candidate = resolve_data_file(str(entry))
            roots.append(candidate)
        return roots

    def get_install_dir(self, project_dir: str) -> Path:
        """Return the directory templates are installed to inside *project_dir*."""
        target = self._section('install').get('target_dir') or ".reviewr"
        return Path(project_dir) / target

    def get_overwrite_default(self) -> bool:
        return bool(self._section('install').get('overwrite', False))

    def get_required_fields(self, kind: str) -> List[str]:
        """Required meta.json fields for *kind*: the base set plus configured extras."""
        kind = normalize_kind(kind)
        extras = (self._section('validation').get('required_fields') or {}).get(kind) or []
        fields = list(BASE_REQUIRED_FIELDS)
        for name in extras:
            if name not in fields:
                fields.append(str(name))
        return fields

    def is_strict(self) -> bool:
        return bool(self._section('validation').get('strict', False))

    def get_remote(self, name: str = "default") -> Dict[str, Any]:
        """Return the settings of a named remote catalog."""
        remotes = self._section('remotes')
        if name not in remotes:
            raise KeyError(f"Remote '{name}' is not configured")
        return remotes[name] or {}

    def get_default(self, section: str, key: str, default: Any = None) -> Any:
        """Get a single value from a config section, falling back to *default*."""
        value = self._section(section).get(key)
        return default if value is None else value

    def validate_config(self) -> bool:
        """Validate the configuration file."""
        try:
            config = self.load_config()
            if not isinstance(config, dict):
                logger.error("Configuration root must be a mapping")
                return False

            catalog_cfg = config.get('catalog', {}) or {}
            paths = catalog_cfg.get('paths', []) or []
            if not isinstance(paths, list):
                logger.error("'catalog.paths' must be a list of directories")
                return False
            if not catalog_cfg.get('include_bundled', True) and not paths:
                logger.error("No catalog roots configured: enable catalog.include_bundled or add catalog.paths")
                return False
            for entry in paths:
                root = Path(str(entry)).expanduser()
                if not root.is_absolute():
                    root = Path(get_data_dir()) / root
                if not root.exists():
                    logger.warning("Catalog path does not exist: %s", root)

            install_cfg = config.get('install', {}) or {}
            target = install_cfg.get('target_dir', ".reviewr")
            if not isinstance(target, str) or not target.strip():
                logger.error("'install.target_dir' must be a non-empty string")
                return False
            if os.path.isabs(target):
                logger.error("'install.target_dir' must be relative to the project directory")
                return False

            required = (config.get('validation', {}) or {}).get('required_fields') or {}
            if not isinstance(required, dict):
                logger.error("'validation.required_fields' must map template kinds to field lists")
                return False
            for kind, fields in required.items():
                if kind not in KINDS:
                    logger.error("Unknown template kind '%s' in validation.required_fields", kind)
                    return False
                if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
                    logger.error("validation.required_fields.%s must be a list of strings", kind)
                    return False

            detection_cfg = config.get('detection', {}) or {}
            max_depth = detection_cfg.get('max_depth', 4)
            if not isinstance(max_depth, int) or max_depth < 1:
                logger.error("'detection.max_depth' must be a positive integer")
                return False
            min_score = detection_cfg.get('min_score', 1)
            if not isinstance(min_score, int) or min_score < 1:
                logger.error("'detection.min_score' must be a positive integer")
                return False

            remotes = config.get('remotes', {}) or {}
            if not isinstance(remotes, dict):
                logger.error("'remotes' must be a mapping of remote names to settings")
                return False
            for name, remote in remotes.items():
                if not isinstance(remote, dict) or not isinstance(remote.get('url'), str):
                    logger.error("Remote '%s' must define a 'url' string", name)
                    return False
                rps = remote.get('rps', 1.0)
                if not isinstance(rps, (int, float)) or rps <= 0:
                    logger.error("Remote '%s' rps must be a positive number", name)
                    return False

            logger.info("Configuration validation passed")
            return True

        except Exception as e:
            logger.error("Configuration validation failed: %s", e)
            return False


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_DIR",
    "BASE_REQUIRED_FIELDS",
]
