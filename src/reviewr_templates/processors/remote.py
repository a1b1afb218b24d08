"""
Remote catalog synchronisation.

A remote catalog is any static HTTP location serving a ``manifest.json`` and
the files it lists, at the same relative paths. Syncing downloads every file,
checks its sha256 against the manifest, and only then writes it under the
destination root.
"""

import hashlib
import logging
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence

from ..core.exceptions import ChecksumMismatchError, ManifestError
from ..core.http_client import RetryableHTTPClient
from ..core.manifest import MANIFEST_FILE, MANIFEST_KIND, write_manifest
from ..core.models import KINDS, normalize_kind

logger = logging.getLogger(__name__)


def _safe_relative(path: str) -> PurePosixPath:
    """Reject manifest paths that would escape the destination root."""
    rel = PurePosixPath(path)
    if rel.is_absolute() or ".." in rel.parts or not rel.parts:
        raise ManifestError(f"Refusing unsafe path in remote manifest: {path!r}")
    return rel


class RemoteCatalog:
    """Fetches a catalog published as manifest.json plus files."""

    def __init__(self, url: str, client: Optional[RetryableHTTPClient] = None):
        if not url:
            raise ValueError("Remote catalog URL is empty")
        self.base_url = url.rstrip("/") + "/"
        self.client = client or RetryableHTTPClient()

    def _url(self, rel: str) -> str:
        return self.base_url + rel.lstrip("/")

    def fetch_manifest(self) -> Dict:
        response = self.client.get_with_retry(self._url(MANIFEST_FILE))
        if response is None:
            raise ManifestError(f"No {MANIFEST_FILE} at {self.base_url}")
        try:
            manifest = response.json()
        except ValueError as exc:
            raise ManifestError(f"Remote {MANIFEST_FILE} is not valid JSON: {exc}") from exc
        if not isinstance(manifest, dict) or manifest.get("kind") != MANIFEST_KIND:
            raise ManifestError(f"{self.base_url}{MANIFEST_FILE} is not a template manifest")
        return manifest

    def sync(self, dest_root: Path, kinds: Optional[Sequence[str]] = None) -> List[str]:
        """Download the catalog (or selected kinds) into *dest_root*.

        Returns:
            Relative paths of the files written

        Raises:
            ChecksumMismatchError: If a downloaded file does not match the manifest
        """
        dest_root = Path(dest_root)
        manifest = self.fetch_manifest()
        wanted = [normalize_kind(k) for k in kinds] if kinds else list(KINDS)

        # Download and verify everything first so a bad file leaves dest_root unchanged
        pending: Dict[PurePosixPath, bytes] = {}
        templates = manifest.get("templates") or {}
        for kind in wanted:
            for entry in templates.get(kind) or []:
                if not isinstance(entry, dict):
                    raise ManifestError(f"Malformed {kind} entry in remote manifest: {entry!r}")
                for file_entry in entry.get("files") or []:
                    if not isinstance(file_entry, dict):
                        raise ManifestError(f"Malformed file entry in remote manifest: {file_entry!r}")
                    rel = _safe_relative(str(file_entry.get("path", "")))
                    expected = file_entry.get("sha256")
                    if not isinstance(expected, str) or not expected:
                        raise ManifestError(f"Remote manifest has no sha256 for {rel.as_posix()}")
                    content = self.client.get_bytes(self._url(rel.as_posix()))
                    actual = hashlib.sha256(content).hexdigest()
                    if expected != actual:
                        raise ChecksumMismatchError(rel.as_posix(), expected, actual)
                    pending[rel] = content

        written = []
        for rel, content in sorted(pending.items()):
            target = dest_root.joinpath(*rel.parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            written.append(rel.as_posix())

        dest_root.mkdir(parents=True, exist_ok=True)
        local_manifest = dict(manifest)
        local_manifest["templates"] = {kind: templates.get(kind) or [] for kind in wanted}
        write_manifest(dest_root / MANIFEST_FILE, local_manifest)
        logger.info("Synced %d files from %s into %s", len(written), self.base_url, dest_root)
        return written

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


__all__ = ["RemoteCatalog"]
