"""Best-effort JSON audit dumps of outgoing payloads.

Active only in debug mode. A failed write is logged and never interrupts
the submission."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

from ..core.interfaces import AuditSink
from ..utils.path_security import safe_join, sanitize_filename

logger = logging.getLogger(__name__)


class JsonAuditSink(AuditSink):
    """Writes `<prefix>_<epoch ms>.json` files under one directory"""

    def __init__(self, directory: str | Path, enabled: bool = True) -> None:
        self.directory = Path(directory)
        self.enabled = enabled

    def dump(self, obj: dict[str, Any], filename_prefix: str) -> None:
        if not self.enabled:
            return
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            filename = f"{sanitize_filename(filename_prefix, default='payload')}_{int(time.time() * 1000)}.json"
            path = safe_join(self.directory, filename)
            path.write_text(json.dumps(obj, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
            logger.debug(f"Audit dump written to {path}")
        except Exception as e:
            logger.warning(f"Could not write audit dump '{filename_prefix}': {e}")


class NullAuditSink(AuditSink):
    """Discards every dump"""

    def dump(self, obj: dict[str, Any], filename_prefix: str) -> None:
        return None
