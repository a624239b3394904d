"""Single-file JSON document store with corruption recovery"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from loandash.config import settings
from loandash.domain.exceptions import StorageError
from loandash.domain.models import AppDocument, AutoArchivePolicy, NotificationSettings

logger = logging.getLogger(__name__)


def default_document() -> AppDocument:
    """Fresh document used on first run or after corruption"""
    return AppDocument(
        dark_mode=True,
        auto_archive=settings.auto_archive_default or AutoArchivePolicy.NEVER.value,
        default_currency=settings.default_currency,
        notification_settings=NotificationSettings(
            enabled=True,
            default_reminder_days=3,
            browser_notifications=True,
            email_notifications=False,
        ),
    )


class JsonDocumentStore:
    """
    Persists the whole application document as one JSON file.

    Reads never fail on bad content: a missing, empty, unparseable or
    invalid file is replaced with the default document (an unreadable file
    is first copied aside as ``<name>.corrupt``). Writes go through a temp
    file and an atomic replace.

    There is no locking. Two overlapping read-modify-write cycles can lose
    one side's changes; the service assumes a single user.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.data_file_path)

    def load(self) -> AppDocument:
        if not self.path.exists():
            logger.info("Data file missing, initializing", extra={"path": str(self.path)})
            return self._initialize()

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read data file {self.path}: {e}") from e

        if not content.strip():
            logger.warning("Data file is empty, re-initializing", extra={"path": str(self.path)})
            return self._initialize()

        try:
            return AppDocument.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Data file is corrupt, re-initializing: {e}", extra={"path": str(self.path)})
            self._quarantine()
            return self._initialize()

    def save(self, document: AppDocument) -> None:
        payload = json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write data file {self.path}: {e}") from e

    def _initialize(self) -> AppDocument:
        document = default_document()
        self.save(document)
        return document

    def _quarantine(self) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            shutil.copyfile(self.path, backup)
        except OSError as e:
            logger.warning(f"Could not keep a copy of the corrupt data file: {e}", extra={"path": str(backup)})
