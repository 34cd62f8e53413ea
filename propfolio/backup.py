"""Portfolio backup export, restore and reminder schedule."""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from propfolio.config import BACKUP_FREQUENCIES
from propfolio.exceptions import BackupError, PersistenceError
from propfolio.models import Property
from propfolio.persistence.base import LocalStorage
from propfolio.persistence.serialization import property_from_dict, property_to_dict

logger = logging.getLogger(__name__)

LAST_BACKUP_KEY = "propfolio_last_backup"
FREQUENCY_KEY = "propfolio_backup_frequency"

# Days allowed between backups before a reminder is due
FREQUENCY_DAYS: dict[str, int | None] = {
    "Daily": 1,
    "Weekly": 7,
    "Monthly": 30,
    "Never": None,
}


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def backup_filename(now: datetime) -> str:
    return f"propfolio_backup_{now.date().isoformat()}.json"


def export_snapshot(
    entities: Iterable[Property],
    output_dir: str | Path,
    now: datetime | None = None,
) -> Path:
    """Write every entity, trashed ones included, to a dated backup file.

    Returns
    -------
    Path
        The written file. A second export on the same day overwrites it.
    """
    now = now or datetime.now(timezone.utc)
    output_dir = Path(output_dir)
    file_path = output_dir / backup_filename(now)
    data = [property_to_dict(p) for p in entities]
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise BackupError(f"Cannot write backup {file_path}: {e}") from e
    logger.info("Backed up %d properties to %s", len(data), file_path)
    return file_path


def read_snapshot(path: str | Path) -> list[Property]:
    """Load entities from a backup file written by :func:`export_snapshot`."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise BackupError(f"Cannot read backup {path}: {e}") from e
    if not isinstance(data, list):
        raise BackupError(f"Backup {path} does not contain a list of properties")
    try:
        return [property_from_dict(item) for item in data]
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise BackupError(f"Backup {path} holds an invalid property record: {e}") from e


def backup_due(
    last_backup: datetime | None,
    frequency: str,
    now: datetime | None = None,
) -> bool:
    """Whether more whole days than ``frequency`` allows have passed.

    Partial days count as a full day. A portfolio never backed up is due
    unless the frequency is ``Never``.
    """
    if frequency not in FREQUENCY_DAYS:
        raise BackupError(f"Unknown backup frequency {frequency!r}")
    limit = FREQUENCY_DAYS[frequency]
    if limit is None:
        return False
    if last_backup is None:
        return True
    now = _as_utc(now or datetime.now(timezone.utc))
    elapsed = abs((now - _as_utc(last_backup)).total_seconds())
    return math.ceil(elapsed / 86400) > limit


class BackupScheduler:
    """Remembers the backup frequency and the last backup in local storage.

    Parameters
    ----------
    storage : LocalStorage
        Durable key/value storage.
    output_dir : str | Path
        Directory backups are written to.
    default_frequency : str
        Frequency used until the user chooses one.
    """

    def __init__(
        self,
        storage: LocalStorage,
        output_dir: str | Path,
        default_frequency: str = "Weekly",
    ) -> None:
        if default_frequency not in BACKUP_FREQUENCIES:
            raise BackupError(f"Unknown backup frequency {default_frequency!r}")
        self._storage = storage
        self.output_dir = Path(output_dir)
        self._default_frequency = default_frequency

    @property
    def frequency(self) -> str:
        stored = self._read(FREQUENCY_KEY)
        return stored if stored in FREQUENCY_DAYS else self._default_frequency

    def set_frequency(self, frequency: str) -> None:
        if frequency not in FREQUENCY_DAYS:
            raise BackupError(f"Unknown backup frequency {frequency!r}")
        self._storage.set(FREQUENCY_KEY, frequency)

    @property
    def last_backup(self) -> datetime | None:
        stored = self._read(LAST_BACKUP_KEY)
        if not stored:
            return None
        try:
            return _as_utc(datetime.fromisoformat(stored))
        except ValueError:
            logger.warning("Ignoring unreadable last backup timestamp %r", stored)
            return None

    def is_due(self, now: datetime | None = None) -> bool:
        return backup_due(self.last_backup, self.frequency, now)

    def perform(self, entities: Iterable[Property], now: datetime | None = None) -> Path:
        """Export a snapshot and record when it was taken."""
        now = now or datetime.now(timezone.utc)
        path = export_snapshot(entities, self.output_dir, now)
        self._storage.set(LAST_BACKUP_KEY, now.isoformat())
        return path

    def _read(self, key: str) -> str | None:
        try:
            return self._storage.get(key)
        except PersistenceError as e:
            logger.warning("Could not read %s: %s", key, e)
            return None
