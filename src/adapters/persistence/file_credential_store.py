from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import ICredentialStore

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "authIdToken"


@dataclass(slots=True)
class FileCredentialStore(ICredentialStore):
    """Keeps bearer credentials in a small JSON file, one entry per client.

    Layout: `{"<client key>": {"authIdToken": "<token>"}}`.

    Env vars:
      - CREDENTIAL_FILE (default: .busnotify/credential.json)
    """

    path: str | Path | None = None

    def _path(self) -> Path:
        value = (
            self.path or os.getenv("CREDENTIAL_FILE") or ".busnotify/credential.json"
        )
        return Path(value)

    def _read(self) -> dict:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, OSError):
            logger.warning("Unreadable credential file", extra={"path": str(path)})
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        path = self._path()
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(path)

    def get(self, client_key: str) -> str | None:
        entry = self._read().get(client_key)
        if not isinstance(entry, dict):
            return None
        token = entry.get(CREDENTIAL_KEY)
        return token if isinstance(token, str) and token else None

    def put(self, client_key: str, token: str) -> None:
        data = self._read()
        data[client_key] = {CREDENTIAL_KEY: token}
        self._write(data)

    def clear(self, client_key: str) -> None:
        data = self._read()
        if data.pop(client_key, None) is not None:
            self._write(data)
