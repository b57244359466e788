"""Initial users, events and participants tables

Revision ID: 4c1d8e2a9f03
Revises: 
Create Date: 2026-10-19 11:40:12.314159

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1d8e2a9f03'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'events',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('rev', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('max_participants', sa.Integer, nullable=True),
        sa.Column('creator_id', sa.String(32), nullable=False),
        sa.Column('creator_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('idx_event_date', 'events', ['date'])
    op.create_index('idx_event_creator', 'events', ['creator_id'])
    op.create_index('idx_event_created_at', 'events', ['created_at'])

    # No foreign key on event_id: participants are removed by the event cascade
    op.create_table(
        'participants',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('rev', sa.String(64), nullable=False),
        sa.Column('event_id', sa.String(32), nullable=False),
        sa.Column('user_id', sa.String(32), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=True),
        sa.Column('user_email', sa.String(255), nullable=True),
        sa.Column('event_title', sa.String(255), nullable=True),
        sa.Column('event_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rsvp_date', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_participant_event_user')
    )
    op.create_index('idx_participant_event', 'participants', ['event_id'])
    op.create_index('idx_participant_user', 'participants', ['user_id'])


def downgrade() -> None:
    op.drop_table('participants')
    op.drop_table('events')
    op.drop_table('users')
