"""Create referral engine tables

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users (referral graph + counters)
    op.create_table(
        'users',
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('referral_code', sa.String(20), nullable=False),
        sa.Column('referrer_id', sa.String(255), nullable=True),
        sa.Column('grand_referrer_id', sa.String(255), nullable=True),
        sa.Column('referral_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_rewards_usd', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('total_rewards_vcn', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('referral_count >= 0', name='check_user_referral_count_non_negative'),
        sa.CheckConstraint('total_rewards_usd >= 0', name='check_user_total_rewards_usd_non_negative'),
        sa.CheckConstraint('total_rewards_vcn >= 0', name='check_user_total_rewards_vcn_non_negative'),
        sa.CheckConstraint(
            'referrer_id IS NULL OR referrer_id != email',
            name='check_user_not_self_referred'
        ),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.email'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['grand_referrer_id'], ['users.email'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('email')
    )
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_referrer_id', 'users', ['referrer_id'])
    op.create_index('ix_users_grand_referrer_id', 'users', ['grand_referrer_id'])
    op.create_index('ix_users_referral_count', 'users', ['referral_count'])

    # Config document store
    op.create_table(
        'referral_configs',
        sa.Column('key', sa.String(50), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('key')
    )

    # Reward ledger
    op.create_table(
        'referral_rewards',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('from_user_id', sa.String(255), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False),
        sa.Column('tier', sa.Integer(), nullable=False),
        sa.Column('event', sa.String(50), nullable=False),
        sa.Column('percentage', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('tx_hash', sa.String(255), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('tier IN (1, 2)', name='check_referral_reward_tier'),
        sa.CheckConstraint('amount >= 0', name='check_referral_reward_amount_non_negative'),
        sa.UniqueConstraint(
            'from_user_id', 'event', 'tx_hash', 'tier',
            name='uq_referral_rewards_event_identity'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.email'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_referral_rewards_user_id', 'referral_rewards', ['user_id'])
    op.create_index('ix_referral_rewards_from_user_id', 'referral_rewards', ['from_user_id'])
    op.create_index('ix_referral_rewards_event', 'referral_rewards', ['event'])
    op.create_index('ix_referral_rewards_status', 'referral_rewards', ['status'])
    op.create_index('ix_referral_rewards_tx_hash', 'referral_rewards', ['tx_hash'])
    op.create_index('ix_referral_rewards_timestamp', 'referral_rewards', ['timestamp'])

    # Reward points
    op.create_table(
        'user_reward_points',
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('total_rp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('claimed_rp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('available_rp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('total_rp >= 0', name='check_rp_total_non_negative'),
        sa.CheckConstraint('available_rp >= 0', name='check_rp_available_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.email'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id')
    )

    op.create_table(
        'reward_point_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.email'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reward_point_history_user_id', 'reward_point_history', ['user_id'])
    op.create_index('ix_reward_point_history_timestamp', 'reward_point_history', ['timestamp'])


def downgrade() -> None:
    op.drop_index('ix_reward_point_history_timestamp', 'reward_point_history')
    op.drop_index('ix_reward_point_history_user_id', 'reward_point_history')
    op.drop_table('reward_point_history')

    op.drop_table('user_reward_points')

    op.drop_index('ix_referral_rewards_timestamp', 'referral_rewards')
    op.drop_index('ix_referral_rewards_tx_hash', 'referral_rewards')
    op.drop_index('ix_referral_rewards_status', 'referral_rewards')
    op.drop_index('ix_referral_rewards_event', 'referral_rewards')
    op.drop_index('ix_referral_rewards_from_user_id', 'referral_rewards')
    op.drop_index('ix_referral_rewards_user_id', 'referral_rewards')
    op.drop_table('referral_rewards')

    op.drop_table('referral_configs')

    op.drop_index('ix_users_referral_count', 'users')
    op.drop_index('ix_users_grand_referrer_id', 'users')
    op.drop_index('ix_users_referrer_id', 'users')
    op.drop_index('ix_users_referral_code', 'users')
    op.drop_table('users')
