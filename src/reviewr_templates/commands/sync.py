"""
Sync command implementation.
Downloads a remote catalog into the runtime data directory.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.config import ConfigManager
from ..core.http_client import RetryableHTTPClient
from ..core.paths import resolve_data_dir
from ..processors.remote import RemoteCatalog

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    remote: str = "default",
    url: Optional[str] = None,
    dest: Optional[str] = None,
    kinds: Optional[Sequence[str]] = None,
) -> List[str]:
    """Sync a remote catalog.

    Args:
        config_path: Path to the main configuration file
        remote: Name of a remote under ``remotes`` in the config
        url: Explicit base URL; overrides the configured remote
        dest: Destination catalog root (default: <data_dir>/catalogs/<remote>)
        kinds: Restrict to these template kinds

    Returns:
        Relative paths of the files written
    """
    config_manager = ConfigManager(config_path)
    if not config_manager.validate_config():
        raise ValueError("Invalid configuration. Run 'reviewr-templates status' for details.")

    settings = {} if url else config_manager.get_remote(remote)
    base_url = url or settings.get('url', '')
    dest_root = Path(dest).expanduser() if dest else resolve_data_dir('catalogs', remote, ensure_exists=True)

    client = RetryableHTTPClient(
        rps=float(settings.get('rps', 1.0)),
        max_retries=int(settings.get('max_retries', 3)),
    )
    with RemoteCatalog(base_url, client) as catalog:
        written = catalog.sync(dest_root, kinds=kinds)

    roots = [p.resolve() for p in config_manager.get_catalog_dirs()]
    if dest_root.resolve() not in roots:
        logger.info("Add %s to catalog.paths in %s to use the synced templates", dest_root, config_manager.config_path)
    return written
