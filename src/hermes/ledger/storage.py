"""JSON snapshot files.

Both persisted structures (the deposit log and the divine token cache) are
plain JSON documents rewritten wholesale on every change. Writes go to a
temporary file in the same directory and are moved into place with
os.replace, so readers never observe a half-written file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


class SnapshotFile:
    """A JSON document stored at a fixed path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Any:
        """Read and parse the file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError, ValueError: If the file cannot be read or parsed
        """
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, data: Any) -> None:
        """Atomically replace the file contents with ``data``.

        Raises:
            OSError, TypeError: If the data cannot be written
        """
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def __repr__(self) -> str:
        return f"SnapshotFile({str(self.path)!r})"
