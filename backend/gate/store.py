# backend/gate/store.py
import hmac
import json
import logging
import os
import tempfile
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class GateStoreError(Exception):
    """The gate record could not be written."""


@dataclass
class GateRecord:
    secure_path: str
    created_at: float

    def matches(self, candidate: str) -> bool:
        """Constant-time comparison of candidate against the secure path."""
        return hmac.compare_digest(candidate.encode("utf-8"), self.secure_path.encode("utf-8"))


class GateStore:
    """
    File-backed store for the single gate record.
    The record is created once and only read afterwards.
    """

    def __init__(self, path):
        self.path = Path(path)
        # guards create() against concurrent setup requests in this process
        self.lock = threading.Lock()

    def load(self) -> Optional[GateRecord]:
        """Return the stored record, or None if missing or unreadable."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable gate file {self.path}: {e}")
            return None
        if not isinstance(data, dict) or not data.get("secure_path"):
            return None
        return GateRecord(
            secure_path=str(data["secure_path"]),
            created_at=float(data.get("created_at", 0)),
        )

    def exists(self) -> bool:
        return self.load() is not None

    def create(self, secure_path: str) -> bool:
        """
        Atomically create the record.
        Returns True if created, False if a record already exists.
        Raises GateStoreError when the file cannot be written.
        """
        record = GateRecord(secure_path=secure_path, created_at=time.time())
        with self.lock:
            if self.exists():
                return False
            tmp_name = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise GateStoreError(f"could not create {self.path.parent}: {e}") from e
            try:
                fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".gate-")
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(asdict(record), fh)
                # link() refuses to replace an existing file, even one written by another process
                os.link(tmp_name, self.path)
            except FileExistsError:
                return False
            except OSError as e:
                raise GateStoreError(f"could not write gate file {self.path}: {e}") from e
            finally:
                if tmp_name:
                    try:
                        os.unlink(tmp_name)
                    except OSError as cleanup_err:
                        logger.debug(f"Could not remove temp file {tmp_name}: {cleanup_err}")
        logger.info(f"Gate record created at {self.path}")
        return True
