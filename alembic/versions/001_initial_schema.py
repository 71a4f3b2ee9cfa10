"""Initial schema - tickets, ticket replies, devices

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the HealthTrackerAI database schema:
- tickets: Support tickets from signed-in users and anonymous sessions
- ticket_replies: Reply thread per ticket
- devices: Push-enabled devices with FCM registration tokens
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create tickets table
    op.create_table(
        'tickets',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('subject', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='open'),
        sa.Column('priority', sa.String(16), nullable=False, server_default='normal'),
        sa.Column('user_id', sa.String(128), nullable=True),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('tags', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('assigned_to', sa.String(128), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_last_read', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_last_read', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tickets_status', 'tickets', ['status'])
    op.create_index('ix_tickets_priority', 'tickets', ['priority'])
    op.create_index('ix_tickets_user_id', 'tickets', ['user_id'])
    op.create_index('ix_tickets_session_id', 'tickets', ['session_id'])
    op.create_index('ix_tickets_updated_at', 'tickets', ['updated_at'])
    op.create_index('ix_tickets_status_updated', 'tickets', ['status', 'updated_at'])

    # Create ticket_replies table
    op.create_table(
        'ticket_replies',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('ticket_id', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_from_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('author_id', sa.String(128), nullable=True),
        sa.Column('author_name', sa.String(200), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('attachments', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_ticket_replies_ticket_id', 'ticket_replies', ['ticket_id'])

    # Create devices table
    op.create_table(
        'devices',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=False, server_default=''),
        sa.Column('device_type', sa.String(16), nullable=False, server_default='Desktop'),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'token', name='uq_devices_user_token'),
    )
    op.create_index('ix_devices_user_id', 'devices', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_devices_user_id', table_name='devices')
    op.drop_table('devices')

    op.drop_index('ix_ticket_replies_ticket_id', table_name='ticket_replies')
    op.drop_table('ticket_replies')

    op.drop_index('ix_tickets_status_updated', table_name='tickets')
    op.drop_index('ix_tickets_updated_at', table_name='tickets')
    op.drop_index('ix_tickets_session_id', table_name='tickets')
    op.drop_index('ix_tickets_user_id', table_name='tickets')
    op.drop_index('ix_tickets_priority', table_name='tickets')
    op.drop_index('ix_tickets_status', table_name='tickets')
    op.drop_table('tickets')
