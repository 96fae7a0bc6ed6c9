"""JSON document stored in a single file."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from newsdigest.utils.exceptions import StorageError


class JsonFileStore:
    """Read and replace one JSON document at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[Any]:
        """Load the stored document.

        Returns:
            Decoded JSON, or None if the file does not exist.

        Raises:
            StorageError: If the file cannot be read or is not valid JSON.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

    def write(self, data: Any) -> None:
        """Replace the stored document.

        The new content is written to a temporary file in the same directory
        and moved into place, so readers never see a half-written file.

        Raises:
            StorageError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
