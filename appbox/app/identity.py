"""Identity store: one CID file per component holding its container id."""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class IdentityStore:
    """
    Reads and writes container identity records.

    A record is a file at ``<cids_root>/<component>`` whose whole content is
    the container id. Its absence means no container was ever installed.
    """

    def path_for(self, cids_root: str, component_name: str) -> str:
        return os.path.join(cids_root, component_name)

    def ensure_root(self, cids_root: str) -> None:
        Path(cids_root).mkdir(parents=True, exist_ok=True)

    def read(self, path: str) -> Optional[str]:
        try:
            with open(path, encoding="utf-8") as f:
                container_id = f.read().strip()
        except FileNotFoundError:
            return None
        return container_id or None

    def write(self, path: str, container_id: str) -> None:
        """Record ``container_id``, replacing any previous record."""
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(container_id)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.debug(f"[identity] wrote {path} -> {container_id[:12]}")

    def delete(self, path: str) -> None:
        """Remove a record. A record that is already gone counts as removed."""
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug(f"[identity] {path} already absent")
            return
        logger.debug(f"[identity] removed {path}")
