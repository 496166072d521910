"""create activity tracking tables

Revision ID: 001_create_activity_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from editor_activity.migrations.util import get_timestamp_default, get_uuid_type


# revision identifiers, used by Alembic.
revision: str = '001_create_activity_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    uuid_type = get_uuid_type()

    op.create_table(
        'activity_sessions',
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_editor_focused', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('focus_duration', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_duration', sa.Float(), nullable=False, server_default='0'),
        sa.Column('last_heartbeat', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('ix_activity_sessions_last_heartbeat', 'activity_sessions', ['last_heartbeat'])

    op.create_table(
        'project_records',
        sa.Column('record_id', uuid_type, nullable=False),
        sa.Column('project_path', sa.Text(), nullable=False),
        sa.Column('structure_envelope', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.PrimaryKeyConstraint('record_id'),
        sa.UniqueConstraint('project_path', name='uq_project_records_project_path'),
    )

    op.create_table(
        'activity_session_projects',
        sa.Column('link_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('record_id', uuid_type, nullable=False),
        sa.Column('linked_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.ForeignKeyConstraint(['user_id'], ['activity_sessions.user_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['record_id'], ['project_records.record_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('link_id'),
        sa.UniqueConstraint('user_id', 'record_id', name='uq_session_project_link'),
    )
    op.create_index(
        'ix_activity_session_projects_user_id', 'activity_session_projects', ['user_id']
    )


def downgrade() -> None:
    op.drop_index('ix_activity_session_projects_user_id', table_name='activity_session_projects')
    op.drop_table('activity_session_projects')
    op.drop_table('project_records')
    op.drop_index('ix_activity_sessions_last_heartbeat', table_name='activity_sessions')
    op.drop_table('activity_sessions')
