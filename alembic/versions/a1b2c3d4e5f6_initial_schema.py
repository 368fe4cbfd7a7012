"""initial_schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None

MOTION_STATUS = sa.Enum('not_yet_started', 'voting_active', 'voting_complete', name='motion_status')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_watcher', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_disabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('NOT (is_admin AND is_watcher)', name='users_role_exclusivity'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'pools',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('pool_key', sa.String(length=255), nullable=False),
        sa.Column('pool_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_disabled', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_pools_pool_key', 'pools', ['pool_key'], unique=True)

    op.create_table(
        'user_pools',
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('pool_id', sa.Integer(), sa.ForeignKey('pools.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_user_pools_pool_id', 'user_pools', ['pool_id'])
    op.create_index('idx_user_pools_user_id', 'user_pools', ['user_id'])

    op.create_table(
        'meetings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('quorum_voting_pool_id', sa.Integer(), sa.ForeignKey('pools.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quorum_called_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('end_date > start_date', name='meetings_valid_dates'),
    )
    op.create_index('ix_meetings_start_date', 'meetings', ['start_date'])
    op.create_index('ix_meetings_quorum_voting_pool_id', 'meetings', ['quorum_voting_pool_id'])

    op.create_table(
        'motions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('meeting_id', sa.Integer(), sa.ForeignKey('meetings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('planned_duration', sa.Integer(), nullable=False),
        sa.Column('seat_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('voting_pool_id', sa.Integer(), sa.ForeignKey('pools.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('status', MOTION_STATUS, nullable=False, server_default='not_yet_started'),
        sa.Column('end_override', sa.DateTime(timezone=True), nullable=True),
        sa.Column('voting_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('voting_ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('planned_duration > 0', name='motions_valid_duration'),
        sa.CheckConstraint('seat_count >= 1', name='motions_valid_seat_count'),
    )
    op.create_index('idx_motions_meeting_id', 'motions', ['meeting_id'])
    op.create_index('idx_motions_status_voting_started_at', 'motions', ['status', 'voting_started_at'])
    op.create_index('idx_motions_voting_pool', 'motions', ['voting_pool_id'])

    op.create_table(
        'choices',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('motion_id', sa.Integer(), sa.ForeignKey('motions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_choices_motion_sort_order', 'choices', ['motion_id', 'sort_order'])

    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('motion_id', sa.Integer(), sa.ForeignKey('motions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_abstain', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'motion_id', name='votes_unique_user_motion'),
    )
    op.create_index('idx_votes_motion_id', 'votes', ['motion_id'])

    op.create_table(
        'vote_choices',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('vote_id', sa.Integer(), sa.ForeignKey('votes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('choice_id', sa.Integer(), sa.ForeignKey('choices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('vote_id', 'choice_id', name='vote_choices_unique'),
    )
    op.create_index('idx_vote_choices_choice_id', 'vote_choices', ['choice_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url_path', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_activity_logs_created_at', 'activity_logs', ['created_at'])
    op.create_index('idx_activity_logs_user_created', 'activity_logs', ['user_id', 'created_at'])


def downgrade():
    op.drop_table('activity_logs')
    op.drop_table('vote_choices')
    op.drop_table('votes')
    op.drop_table('choices')
    op.drop_table('motions')
    MOTION_STATUS.drop(op.get_bind(), checkfirst=True)
    op.drop_table('meetings')
    op.drop_table('user_pools')
    op.drop_table('pools')
    op.drop_table('users')
