"""
Command context for shared initialization across CLI commands.

Loads and validates the configuration and builds the template catalog from
the configured roots, so command implementations start from one object.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .catalog import TemplateCatalog
from .config import ConfigManager


logger = logging.getLogger(__name__)


class CommandContext:
    """Encapsulates shared initialization logic for CLI commands.

    Example:
        ```python
        with CommandContext(config_path) as ctx:
            for record in ctx.catalog.list(kind="skills"):
                print(record.name)
        ```
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize command context with config and catalog.

        Raises:
            ValueError: If configuration is invalid
        """
        self.config_manager = ConfigManager(config_path)

        if not self.config_manager.validate_config():
            raise ValueError("Invalid configuration. Run 'reviewr-templates status' for details.")

        self.config = self.config_manager.load_config()
        self.catalog = TemplateCatalog(self.config_manager.get_catalog_dirs())

        logger.debug("CommandContext initialized with config from %s", self.config_manager.config_path)

    def get_default(self, section: str, key: str, default: Any = None) -> Any:
        return self.config_manager.get_default(section, key, default)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass
