"""
Client Notes Cache - Optimistic local view of one client's notes.

Mutations are applied locally before the remote call returns and are reverted
if it fails (toggle, update, remove); toggle and update ignore ids not in the
collection. add() waits for the server row, so a failed add leaves the
collection untouched. Callers serialize operations; nothing here locks.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from database.models import utcnow
from services.notes_repository import NOTES_TABLE, Note, OwnerKey, owner_matches
from services.reconciliation import ReconciliationHook
from validators import clean_note_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteStats:
    total: int
    completed: int
    pending: int
    completion_rate: float

    def to_dict(self):
        return {
            'total': self.total,
            'completed': self.completed,
            'pending': self.pending,
            'completion_rate': self.completion_rate
        }


class ClientNotesCache:
    """Ordered, newest-first collection of a client's notes."""

    def __init__(self, repository, owner: OwnerKey):
        self.repository = repository
        self.owner = owner
        self.notes: List[Note] = []
        self.loading = False
        self.error: Optional[str] = None
        self._hook = ReconciliationHook(
            repository.store,
            NOTES_TABLE,
            lambda record: owner_matches(record, owner),
            self.load
        )

    # -- lifecycle ---------------------------------------------------------

    def mount(self):
        """Initial load plus subscription to remote changes for this owner."""
        self._hook.start()
        return self

    def unmount(self):
        self._hook.stop()

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc, tb):
        self.unmount()
        return False

    # -- reads ---------------------------------------------------------------

    def load(self):
        """Replace the collection with the remote rows. Never raises."""
        self.loading = True
        self.error = None
        try:
            self.notes = self.repository.get_client_notes(self.owner)
        except Exception as e:
            logger.error(f"Failed to load client notes for {self.owner.client_id}: {e}")
            self.error = str(e) or 'Failed to load notes'
            self.notes = []
        finally:
            self.loading = False
        return self.notes

    def get(self, note_id: str) -> Optional[Note]:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def stats(self) -> NoteStats:
        total = len(self.notes)
        completed = sum(1 for note in self.notes if note.completed)
        return NoteStats(
            total=total,
            completed=completed,
            pending=total - completed,
            completion_rate=(completed / total) * 100 if total > 0 else 0
        )

    # -- mutations -------------------------------------------------------------

    def add(self, text: str) -> Optional[Note]:
        cleaned = clean_note_text(text)
        if not cleaned:
            return None

        try:
            note = self.repository.add_client_note(self.owner, cleaned)
        except Exception as e:
            logger.error(f"Failed to add note: {e}")
            raise

        self.notes = [note] + self.notes
        return note

    def toggle(self, note_id: str) -> Optional[Note]:
        original = self.get(note_id)
        if original is None:
            return None

        completed = not original.completed
        toggled = replace(
            original,
            completed=completed,
            completed_at=utcnow() if completed else None
        )
        self._put(toggled)

        try:
            self.repository.toggle_client_note(note_id, completed)
        except Exception as e:
            logger.error(f"Failed to toggle note {note_id}: {e}")
            self._put(original)
            raise

        return toggled

    def remove(self, note_id: str) -> None:
        removed = self.get(note_id)
        self.notes = [note for note in self.notes if note.id != note_id]

        try:
            self.repository.delete_client_note(note_id)
        except Exception as e:
            logger.error(f"Failed to delete note {note_id}: {e}")
            if removed is not None:
                self.notes = sorted(
                    self.notes + [removed],
                    key=lambda note: note.created_at,
                    reverse=True
                )
            raise

    def update(self, note_id: str, text: str) -> Optional[Note]:
        cleaned = clean_note_text(text)
        if not cleaned:
            return None

        original = self.get(note_id)
        if original is None:
            return None

        edited = replace(original, text=cleaned, updated_at=utcnow())
        self._put(edited)

        try:
            self.repository.update_client_note(note_id, cleaned)
        except Exception as e:
            logger.error(f"Failed to update note {note_id}: {e}")
            self._put(original)
            raise

        return edited

    def _put(self, note: Note):
        self.notes = [note if existing.id == note.id else existing for existing in self.notes]
