"""
MAC-keyed persistence of client metadata (tags, hidden flag, blocked intent).
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .db import ClientRecord
from .exceptions import UnifiValidationError
from .logging import get_logger
from .models.metadata import ClientMetadata
from .utils import normalize_mac, unique_tags

logger = get_logger(__name__)

# Accepted update keys: wire names and attribute names both map to the column.
FIELD_ALIASES = {
    "tags": "tags",
    "hidden": "hidden",
    "blocked": "blocked",
    "lastBlockedAt": "last_blocked_at",
    "last_blocked_at": "last_blocked_at",
    "name": "name",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise UnifiValidationError(f"lastBlockedAt is not an ISO-8601 timestamp: {value!r}") from e
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    raise UnifiValidationError(f"lastBlockedAt must be a timestamp string or null, got {value!r}")


def clean_update(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial metadata update and map it to column names.

    Args:
        data: Partial update using wire (``lastBlockedAt``) or attribute names.

    Returns:
        Dictionary keyed by column name with validated values.

    Raises:
        UnifiValidationError: On unknown keys or wrongly typed values.
    """
    if not isinstance(data, dict):
        raise UnifiValidationError("Client data must be an object")

    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "mac":
            continue
        column = FIELD_ALIASES.get(key)
        if column is None:
            raise UnifiValidationError(f"Unknown client field: {key}")

        if column == "tags":
            if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
                raise UnifiValidationError("tags must be a list of strings")
            value = unique_tags(value)
        elif column in ("hidden", "blocked"):
            if not isinstance(value, bool):
                raise UnifiValidationError(f"{key} must be a boolean")
        elif column == "last_blocked_at":
            value = _parse_datetime(value)
        elif column == "name":
            if value is not None and not isinstance(value, str):
                raise UnifiValidationError("name must be a string or null")
        cleaned[column] = value
    return cleaned


def _to_metadata(record: ClientRecord) -> ClientMetadata:
    return ClientMetadata(
        mac=record.mac,
        tags=json.loads(record.tags or "[]"),
        hidden=bool(record.hidden),
        blocked=bool(record.blocked),
        last_blocked_at=record.last_blocked_at,
        name=record.name,
    )


class ClientStore:
    """
    Reads and upserts ``ClientMetadata`` rows.

    Every call opens its own session, so concurrent requests touching
    different MACs never share state.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _key(mac: str) -> str:
        if not isinstance(mac, str) or not mac.strip():
            raise UnifiValidationError("MAC address is required")
        return normalize_mac(mac)

    def get(self, mac: str) -> Optional[ClientMetadata]:
        key = self._key(mac)
        with self.session_factory() as session:
            record = session.get(ClientRecord, key)
            return _to_metadata(record) if record else None

    def get_all(self) -> Dict[str, ClientMetadata]:
        """Return every stored metadata record keyed by MAC."""
        try:
            with self.session_factory() as session:
                records = session.scalars(select(ClientRecord).order_by(ClientRecord.mac)).all()
                return {record.mac: _to_metadata(record) for record in records}
        except SQLAlchemyError as e:
            logger.error(f"Error loading client data: {e}")
            raise

    def upsert(self, mac: str, data: Dict[str, Any]) -> ClientMetadata:
        """
        Create or partially update the metadata for a MAC.

        Only the fields present in ``data`` are written. A MAC seen for the
        first time starts from empty tags, hidden=False and blocked=False.

        Args:
            mac: Client MAC address in any common format.
            data: Partial update (see :func:`clean_update`).

        Returns:
            The stored metadata after the update.

        Raises:
            UnifiValidationError: If the MAC is missing or the update is malformed.
        """
        key = self._key(mac)
        update = clean_update(data)

        try:
            with self.session_factory() as session:
                record = session.get(ClientRecord, key)
                if record is None:
                    logger.debug(f"Creating metadata record for {key}")
                    record = ClientRecord(
                        mac=key, tags="[]", hidden=False, blocked=False,
                        last_blocked_at=None, name=None)
                    session.add(record)

                for column, value in update.items():
                    if column == "tags":
                        value = json.dumps(value)
                    setattr(record, column, value)

                session.commit()
                logger.info(f"Saved client data for {key}: {sorted(update)}")
                return _to_metadata(record)
        except SQLAlchemyError as e:
            logger.error(f"Error saving client data for {key}: {e}")
            raise

    def save_hidden_state(self, mac: str, hidden: bool) -> ClientMetadata:
        return self.upsert(mac, {"hidden": hidden})

    def save_blocked_state(self, mac: str, blocked: bool) -> ClientMetadata:
        """Record blocked intent, stamping ``last_blocked_at`` when blocking and clearing it otherwise."""
        return self.upsert(mac, {
            "blocked": blocked,
            "last_blocked_at": _utcnow() if blocked else None,
        })

    def load_hidden_states(self) -> Dict[str, bool]:
        return {mac: meta.hidden for mac, meta in self.get_all().items()}

    def load_blocked_states(self) -> Dict[str, bool]:
        return {mac: meta.blocked for mac, meta in self.get_all().items()}
