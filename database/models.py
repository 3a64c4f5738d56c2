"""
SQLAlchemy models for the Websiter back-office.
Defines the client notes, projects, invoices, notifications and support ticket tables.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Text, Float, Boolean, DateTime, JSON, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from database.connection import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in development and tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# CLIENT NOTES
# =============================================================================

class ClientNote(Base):
    """
    Admin to-do notes attached to a client.

    A note is addressable by client_id or client_email; both are written on
    insert.
    """
    __tablename__ = 'client_notes'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    client_id = Column(String(36), nullable=False)
    client_email = Column(String(255))
    text = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    created_by = Column(String(36))

    __table_args__ = (
        Index('ix_client_notes_client_id', 'client_id'),
        Index('ix_client_notes_client_email', 'client_email'),
        Index('ix_client_notes_created_at', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'client_email': self.client_email,
            'text': self.text,
            'completed': bool(self.completed),
            'created_at': _iso(self.created_at),
            'completed_at': _iso(self.completed_at),
            'updated_at': _iso(self.updated_at),
            'created_by': self.created_by
        }


# =============================================================================
# PROJECTS
# =============================================================================

class Project(Base):
    """Website-development orders placed by clients."""
    __tablename__ = 'projects'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    client_id = Column(String(36), nullable=False)
    client_email = Column(String(255))
    title = Column(String(255), nullable=False)
    status = Column(String(50), default='new', nullable=False)
    priority = Column(String(20), default='medium', nullable=False)  # low, medium, high
    price = Column(Float, default=0)
    contact_info = Column(JSONType, default=dict)
    purpose = Column(JSONType, default=dict)
    features = Column(JSONType, default=list)  # selected feature ids
    preferences = Column(JSONType, default=dict)
    admin_notes = Column(Text)
    admin_todos = Column(JSONType, default=list)  # [{id, text, completed}]
    estimated_hours = Column(Float)
    estimated_days = Column(Float)
    hours_needed = Column(Float)
    target_completion_date = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_projects_client_id', 'client_id'),
        Index('ix_projects_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'client_email': self.client_email,
            'title': self.title,
            'status': self.status,
            'priority': self.priority,
            'price': self.price,
            'contact_info': self.contact_info or {},
            'purpose': self.purpose or {},
            'features': self.features or [],
            'preferences': self.preferences or {},
            'admin_notes': self.admin_notes,
            'admin_todos': self.admin_todos or [],
            'estimated_hours': self.estimated_hours,
            'estimated_days': self.estimated_days,
            'hours_needed': self.hours_needed,
            'target_completion_date': _iso(self.target_completion_date),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# =============================================================================
# INVOICES
# =============================================================================

class Invoice(Base):
    """
    Invoices issued against a project.

    Line items live in a JSON column; subtotal, tax and total are computed by
    the code that builds the invoice, not by the database.
    """
    __tablename__ = 'invoices'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), nullable=False)
    project_id = Column(String(36), nullable=False)
    client_id = Column(String(36))
    client_name = Column(String(255))
    client_email = Column(String(255))
    issue_date = Column(DateTime, default=utcnow)
    due_date = Column(DateTime)
    status = Column(String(20), default='draft', nullable=False)
    items = Column(JSONType, default=list)
    subtotal = Column(Float, default=0)
    tax_rate = Column(Float, default=0)
    tax_amount = Column(Float, default=0)
    total = Column(Float, default=0)
    payment_options = Column(JSONType, default=dict)
    notes = Column(Text)
    terms = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    sent_at = Column(DateTime)
    paid_at = Column(DateTime)

    __table_args__ = (
        Index('ix_invoices_project_id', 'project_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_created_at', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_number': self.invoice_number,
            'project_id': self.project_id,
            'client_id': self.client_id,
            'client_name': self.client_name,
            'client_email': self.client_email,
            'issue_date': _iso(self.issue_date),
            'due_date': _iso(self.due_date),
            'status': self.status,
            'items': self.items or [],
            'subtotal': self.subtotal,
            'tax_rate': self.tax_rate,
            'tax_amount': self.tax_amount,
            'total': self.total,
            'payment_options': self.payment_options or {},
            'notes': self.notes,
            'terms': self.terms,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'sent_at': _iso(self.sent_at),
            'paid_at': _iso(self.paid_at)
        }


# =============================================================================
# NOTIFICATIONS
# =============================================================================

class Notification(Base):
    """In-app notifications, either global or addressed to one recipient."""
    __tablename__ = 'notifications'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), default='info', nullable=False)  # info, success, warning, error
    recipient_id = Column(String(36))  # None for global notifications
    is_global = Column(Boolean, default=False, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index('ix_notifications_recipient', 'recipient_id'),
        Index('ix_notifications_is_read', 'is_read'),
        Index('ix_notifications_created_at', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'recipient_id': self.recipient_id,
            'is_global': bool(self.is_global),
            'is_read': bool(self.is_read),
            'created_at': _iso(self.created_at)
        }


# =============================================================================
# SUPPORT TICKETS
# =============================================================================

class SupportTicket(Base):
    """Support requests raised by clients, optionally about one project."""
    __tablename__ = 'support_tickets'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    client_id = Column(String(36), nullable=False)
    project_id = Column(String(36))
    subject = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False)
    priority = Column(String(20), default='medium', nullable=False)  # low, medium, high, urgent
    description = Column(Text, nullable=False)
    status = Column(String(20), default='open', nullable=False)  # open, in_progress, resolved, closed
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_support_tickets_client_id', 'client_id'),
        Index('ix_support_tickets_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'project_id': self.project_id,
            'subject': self.subject,
            'category': self.category,
            'priority': self.priority,
            'description': self.description,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class TicketResponse(Base):
    """One message in a ticket thread, from the client or an admin."""
    __tablename__ = 'ticket_responses'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    ticket_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)
    message = Column(Text, nullable=False)
    is_admin_response = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index('ix_ticket_responses_ticket_id', 'ticket_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'ticket_id': self.ticket_id,
            'user_id': self.user_id,
            'message': self.message,
            'is_admin_response': bool(self.is_admin_response),
            'created_at': _iso(self.created_at)
        }


# Table name -> model, used by the remote store adapter
TABLE_MODELS = {
    model.__tablename__: model
    for model in (ClientNote, Project, Invoice, Notification, SupportTicket, TicketResponse)
}
