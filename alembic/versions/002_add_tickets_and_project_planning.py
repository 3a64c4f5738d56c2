"""Add support tickets and project planning columns

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    # Admin planning fields on projects
    op.add_column('projects', sa.Column(
        'admin_todos',
        sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
        nullable=True
    ))
    op.add_column('projects', sa.Column('estimated_hours', sa.Float(), nullable=True))
    op.add_column('projects', sa.Column('estimated_days', sa.Float(), nullable=True))
    op.add_column('projects', sa.Column('hours_needed', sa.Float(), nullable=True))
    op.add_column('projects', sa.Column('target_completion_date', sa.DateTime(), nullable=True))

    op.create_table('support_tickets',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('client_id', sa.String(36), nullable=False),
        sa.Column('project_id', sa.String(36), nullable=True),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='open'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_support_tickets_client_id', 'support_tickets', ['client_id'], unique=False)
    op.create_index('ix_support_tickets_status', 'support_tickets', ['status'], unique=False)

    op.create_table('ticket_responses',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('ticket_id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_admin_response', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ticket_responses_ticket_id', 'ticket_responses', ['ticket_id'], unique=False)


def downgrade():
    op.drop_index('ix_ticket_responses_ticket_id', table_name='ticket_responses')
    op.drop_table('ticket_responses')

    op.drop_index('ix_support_tickets_status', table_name='support_tickets')
    op.drop_index('ix_support_tickets_client_id', table_name='support_tickets')
    op.drop_table('support_tickets')

    op.drop_column('projects', 'target_completion_date')
    op.drop_column('projects', 'hours_needed')
    op.drop_column('projects', 'estimated_days')
    op.drop_column('projects', 'estimated_hours')
    op.drop_column('projects', 'admin_todos')
