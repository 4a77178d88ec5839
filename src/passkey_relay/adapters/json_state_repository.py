"""JSON file state repository."""

import json
import os
import tempfile
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

from passkey_relay.services.state_store import StateRepository


@dataclass
class JsonFileStateRepository(StateRepository):
    """Stores the state document as one pretty-printed JSON file."""

    path: Path

    def load(self) -> dict[str, object] | None:
        """Return the stored document, or None when the file is absent."""
        if not self.path.exists():
            return None
        with self.path.open(encoding="utf-8") as handle:
            return json.load(handle)

    def save(self, document: dict[str, object]) -> None:
        """Write the document to a temp file and atomically replace the target."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
