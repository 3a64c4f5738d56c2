"""
Client Notes Repository - Remote operations on the client_notes table.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from dateutil import parser as date_parser

from database.models import utcnow
from validators import ValidationError, clean_note_text

logger = logging.getLogger(__name__)

NOTES_TABLE = 'client_notes'

LOOKUP_ID_THEN_EMAIL = 'id_then_email'
LOOKUP_ID_ONLY = 'id_only'
LOOKUP_MODES = (LOOKUP_ID_THEN_EMAIL, LOOKUP_ID_ONLY)


def parse_timestamp(value) -> Optional[datetime]:
    """ISO string or datetime -> naive UTC datetime."""
    if value is None or value == '':
        return None
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class OwnerKey:
    """Identifies the client a set of notes belongs to."""
    client_id: str
    client_email: Optional[str] = None


@dataclass(frozen=True)
class Note:
    id: str
    client_id: str
    client_email: Optional[str]
    text: str
    completed: bool
    created_at: datetime
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict) -> 'Note':
        return cls(
            id=row['id'],
            client_id=row.get('client_id'),
            client_email=row.get('client_email'),
            text=row['text'],
            completed=bool(row.get('completed')),
            created_at=parse_timestamp(row.get('created_at')),
            completed_at=parse_timestamp(row.get('completed_at')),
            updated_at=parse_timestamp(row.get('updated_at')),
            created_by=row.get('created_by') or None
        )

    def to_dict(self) -> Dict:
        data = asdict(self)
        for key in ('created_at', 'completed_at', 'updated_at'):
            data[key] = data[key].isoformat() if data[key] else None
        return data


def owner_matches(record: Dict, owner: OwnerKey) -> bool:
    """True when a client_notes row belongs to owner, by client id or by email."""
    if not record:
        return False
    if owner.client_id and record.get('client_id') == owner.client_id:
        return True
    if owner.client_email and record.get('client_email') == owner.client_email:
        return True
    return False


class ClientNotesRepository:
    """Notes for one remote store; all methods raise on remote failure."""

    def __init__(self, store, lookup_mode: str = LOOKUP_ID_THEN_EMAIL):
        if lookup_mode not in LOOKUP_MODES:
            raise ValueError(f"Unknown notes lookup mode: {lookup_mode}")
        self.store = store
        self.lookup_mode = lookup_mode

    def get_client_notes(self, owner: OwnerKey) -> List[Note]:
        """
        Fetch a client's notes, newest first.

        Looks up by client id; in id_then_email mode, an empty result falls
        back to the client email. Rows are de-duplicated by id.
        """
        logger.debug(f"Fetching client notes for {owner}")
        rows = self.store.select(
            NOTES_TABLE,
            filters={'client_id': owner.client_id},
            order_by='created_at',
            descending=True
        )

        if not rows and owner.client_email and self.lookup_mode == LOOKUP_ID_THEN_EMAIL:
            rows = rows + self.store.select(
                NOTES_TABLE,
                filters={'client_email': owner.client_email},
                order_by='created_at',
                descending=True
            )

        seen = set()
        notes = []
        for row in rows:
            if row['id'] in seen:
                continue
            seen.add(row['id'])
            notes.append(Note.from_row(row))

        logger.info(f"Client notes fetched: {len(notes)} notes for {owner.client_id}")
        return notes

    def add_client_note(self, owner: OwnerKey, text: str, created_by: Optional[str] = None) -> Note:
        cleaned = clean_note_text(text)
        if not cleaned:
            raise ValidationError("Note text cannot be empty", field='text')

        values = {
            'client_id': owner.client_id,
            'client_email': owner.client_email,
            'text': cleaned,
            'completed': False
        }
        if created_by:
            values['created_by'] = created_by

        try:
            row = self.store.insert(NOTES_TABLE, values)
        except Exception as e:
            logger.error(f"Error adding client note for {owner.client_id}: {e}")
            raise

        logger.info(f"Client note added for {owner.client_id}")
        return Note.from_row(row)

    def toggle_client_note(self, note_id: str, completed: bool) -> Optional[Dict]:
        now = utcnow()
        values = {
            'completed': completed,
            'completed_at': now if completed else None,
            'updated_at': now
        }
        try:
            return self.store.update(NOTES_TABLE, note_id, values)
        except Exception as e:
            logger.error(f"Error toggling client note {note_id}: {e}")
            raise

    def update_client_note(self, note_id: str, text: str) -> Optional[Dict]:
        cleaned = clean_note_text(text)
        if not cleaned:
            raise ValidationError("Note text cannot be empty", field='text')

        try:
            return self.store.update(NOTES_TABLE, note_id, {'text': cleaned, 'updated_at': utcnow()})
        except Exception as e:
            logger.error(f"Error updating client note {note_id}: {e}")
            raise

    def delete_client_note(self, note_id: str) -> None:
        try:
            self.store.delete(NOTES_TABLE, note_id)
        except Exception as e:
            logger.error(f"Error deleting client note {note_id}: {e}")
            raise
        logger.info(f"Client note {note_id} deleted")

    def get_client_notes_stats(self, owner: OwnerKey) -> Dict[str, int]:
        notes = self.get_client_notes(owner)
        completed = sum(1 for note in notes if note.completed)
        return {
            'total': len(notes),
            'completed': completed,
            'pending': len(notes) - completed
        }

    def subscribe_to_client_notes(self, owner: OwnerKey, callback: Callable):
        """Deliver change events for rows belonging to owner."""
        return self.store.subscribe(
            NOTES_TABLE,
            lambda record: owner_matches(record, owner),
            callback
        )
