"""
Services package for the Websiter back-office.
Remote store adapters, the notes sync layer, and project, invoice, notification and ticket services.
"""

from services.change_feed import ChangeEvent, ChangeFeed, Subscription
from services.remote_store import RemoteStore, RemoteStoreError, DatabaseStore
from services.rest_store import RestStore
from services.notes_repository import ClientNotesRepository, Note, OwnerKey, owner_matches
from services.notes_cache import ClientNotesCache, NoteStats
from services.reconciliation import ReconciliationHook
from services.project_status import ProjectStatus, KanbanBoard, KANBAN_COLUMNS
from services.projects_repository import ProjectsRepository
from services.invoice_service import InvoiceService
from services.notification_service import NotificationService
from services.tickets_repository import TicketsRepository

__all__ = [
    'ChangeEvent',
    'ChangeFeed',
    'Subscription',
    'RemoteStore',
    'RemoteStoreError',
    'DatabaseStore',
    'RestStore',
    'ClientNotesRepository',
    'Note',
    'OwnerKey',
    'owner_matches',
    'ClientNotesCache',
    'NoteStats',
    'ReconciliationHook',
    'ProjectStatus',
    'KanbanBoard',
    'KANBAN_COLUMNS',
    'ProjectsRepository',
    'InvoiceService',
    'NotificationService',
    'TicketsRepository'
]
