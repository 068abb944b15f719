"""create users, gyms, memberships, admin logs, login attempts

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-18 10:12:31

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('platform_role', sa.String(length=20), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('locale', sa.String(length=10), nullable=False),
        sa.Column('theme', sa.String(length=20), nullable=False),
        sa.Column('refresh_token_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("platform_role IN ('USER', 'ADMIN')", name='platform_role'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'gyms',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_programming', sa.Boolean(), nullable=False),
        sa.Column('is_auto_subscription', sa.Boolean(), nullable=False),
        sa.Column('enrollment_code', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('PENDING_APPROVAL', 'ACTIVE', 'REJECTED', 'SUSPENDED')",
            name='gym_status',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gyms_name', 'gyms', ['name'], unique=True)

    op.create_table(
        'memberships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('gym_id', sa.Uuid(), nullable=False),
        sa.Column('gym_role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "gym_role IN ('OWNER', 'PROGRAMMER', 'COACH', 'ATHLETE')",
            name='gym_role',
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'ACTIVE', 'INACTIVE', 'BANNED')",
            name='membership_status',
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'gym_id', name='uq_memberships_user_gym'),
    )
    op.create_index('ix_memberships_user_id', 'memberships', ['user_id'])
    op.create_index('ix_memberships_gym_id', 'memberships', ['gym_id'])

    op.create_table(
        'membership_permissions',
        sa.Column('membership_id', sa.Uuid(), nullable=False),
        sa.Column('permission', sa.String(length=30), nullable=False),
        sa.CheckConstraint(
            "permission IN ('WOD_WRITE', 'SCORE_VERIFY', 'MANAGE_MEMBERSHIPS', 'MANAGE_SETTINGS')",
            name='permission',
        ),
        sa.ForeignKeyConstraint(['membership_id'], ['memberships.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('membership_id', 'permission'),
    )

    op.create_table(
        'admin_action_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=False),
        sa.Column('target_user_id', sa.Uuid(), nullable=True),
        sa.Column('target_gym_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=30), nullable=False),
        sa.Column('before_status', sa.String(length=30), nullable=True),
        sa.Column('after_status', sa.String(length=30), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "action IN ('APPROVE_GYM', 'REJECT_GYM', 'SUSPEND_GYM', 'REACTIVATE_GYM', 'IMPERSONATE_USER')",
            name='admin_action',
        ),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
        sa.ForeignKeyConstraint(['target_user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'login_attempts',
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('failed_count', sa.Integer(), nullable=False),
        sa.Column('first_failed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('email'),
    )


def downgrade() -> None:
    op.drop_table('login_attempts')
    op.drop_table('admin_action_logs')
    op.drop_table('membership_permissions')
    op.drop_index('ix_memberships_gym_id', table_name='memberships')
    op.drop_index('ix_memberships_user_id', table_name='memberships')
    op.drop_table('memberships')
    op.drop_index('ix_gyms_name', table_name='gyms')
    op.drop_table('gyms')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
