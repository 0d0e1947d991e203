import json
import logging
import os
import tempfile
from pathlib import Path

from tinify_optimizer.repositories.credential_repository.credential_repository_interface import (
    CredentialRepositoryInterface,
)


class JsonFileCredentialRepository(CredentialRepositoryInterface):
    SESSION_FILENAME: str = "session.json"

    def __init__(self, session_dir: str, logger: logging.Logger | None = None):
        self.session_dir = Path(session_dir).expanduser()
        self.session_file = self.session_dir / self.SESSION_FILENAME
        self.logger = logger or logging.getLogger("JsonFileCredentialRepository")

    def get_token(self) -> str | None:
        """
        Read the cached session token. Missing or malformed files yield None.
        """
        try:
            raw = self.session_file.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            self.logger.debug("No usable session at %s: %s", self.session_file, e)
            return None

        if not isinstance(data, dict):
            return None

        token = data.get("session_token")
        if isinstance(token, str) and token:
            return token
        return None

    def save_token(self, token: str) -> None:
        """
        Persist the session token, replacing the previous record atomically.
        """
        self.session_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.session_dir, prefix=".session-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"session_token": token}, handle, indent=2)
            os.replace(tmp_path, self.session_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self.logger.info("Session token saved to %s", self.session_file)
