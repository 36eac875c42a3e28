"""Create affiliate tables

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

Creates:
1. affiliate_profiles
2. affiliate_clicks
3. affiliate_withdraw_requests
4. affiliate_commissions
5. settings (key/value documents, holds affiliate_config)
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
    # ========== 1. Profiles ==========
    op.create_table(
        'affiliate_profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('affiliate_code', sa.String(32), nullable=False, comment='Upper-case referral code'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_affiliate_profiles_user_id', 'affiliate_profiles', ['user_id'], unique=True)
    op.create_index('ix_affiliate_profiles_affiliate_code', 'affiliate_profiles', ['affiliate_code'], unique=True)
    op.create_index('ix_affiliate_profiles_status', 'affiliate_profiles', ['status'])

    # ========== 2. Clicks ==========
    op.create_table(
        'affiliate_clicks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_profile_id', sa.Integer(), nullable=False),
        sa.Column('visitor_key', sa.String(128), nullable=False, server_default=''),
        sa.Column('landing_path', sa.String(512), nullable=False, server_default=''),
        sa.Column('referrer', sa.String(1024), nullable=False, server_default=''),
        sa.Column('client_ip', sa.String(64), nullable=False, server_default=''),
        sa.Column('user_agent', sa.String(1024), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['affiliate_profile_id'], ['affiliate_profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_affiliate_clicks_affiliate_profile_id', 'affiliate_clicks', ['affiliate_profile_id'])
    op.create_index('ix_affiliate_clicks_created_at', 'affiliate_clicks', ['created_at'])
    op.create_index(
        'idx_affiliate_clicks_dedupe',
        'affiliate_clicks',
        ['affiliate_profile_id', 'visitor_key', 'created_at'],
    )
    op.create_index('idx_affiliate_clicks_visitor', 'affiliate_clicks', ['visitor_key', 'created_at'])

    # ========== 3. Withdraw requests ==========
    op.create_table(
        'affiliate_withdraw_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_profile_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(20, 2), nullable=False),
        sa.Column('channel', sa.String(50), nullable=False),
        sa.Column('account', sa.String(255), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending_review'),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reject_reason', sa.String(255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['affiliate_profile_id'], ['affiliate_profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_affiliate_withdraw_requests_affiliate_profile_id',
        'affiliate_withdraw_requests',
        ['affiliate_profile_id'],
    )
    op.create_index('ix_affiliate_withdraw_requests_status', 'affiliate_withdraw_requests', ['status'])
    op.create_index('ix_affiliate_withdraw_requests_created_at', 'affiliate_withdraw_requests', ['created_at'])

    # ========== 4. Commissions ==========
    op.create_table(
        'affiliate_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_profile_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('commission_type', sa.String(20), nullable=False, server_default='order'),
        sa.Column('base_amount', sa.DECIMAL(20, 2), nullable=False, server_default='0', comment='Eligible order amount'),
        sa.Column('rate_percent', sa.DECIMAL(10, 2), nullable=False, server_default='0', comment='Commission rate, percent'),
        sa.Column('commission_amount', sa.DECIMAL(20, 2), nullable=False, server_default='0', comment='Current commission value'),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending_confirm'),
        sa.Column('confirm_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('available_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('withdraw_request_id', sa.Integer(), nullable=True),
        sa.Column('invalid_reason', sa.String(255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['affiliate_profile_id'], ['affiliate_profiles.id']),
        sa.ForeignKeyConstraint(['withdraw_request_id'], ['affiliate_withdraw_requests.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'order_id',
            'affiliate_profile_id',
            'commission_type',
            name='uq_affiliate_commission_order_profile_type',
        ),
    )
    op.create_index('ix_affiliate_commissions_affiliate_profile_id', 'affiliate_commissions', ['affiliate_profile_id'])
    op.create_index('ix_affiliate_commissions_order_id', 'affiliate_commissions', ['order_id'])
    op.create_index('ix_affiliate_commissions_status', 'affiliate_commissions', ['status'])
    op.create_index('ix_affiliate_commissions_withdraw_request_id', 'affiliate_commissions', ['withdraw_request_id'])
    op.create_index(
        'idx_affiliate_commissions_profile_status',
        'affiliate_commissions',
        ['affiliate_profile_id', 'status'],
    )
    op.create_index('idx_affiliate_commissions_confirm', 'affiliate_commissions', ['status', 'confirm_at'])

    # ========== 5. Settings ==========
    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(64), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_settings_key', 'settings', ['key'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_settings_key', 'settings')
    op.drop_table('settings')

    op.drop_index('idx_affiliate_commissions_confirm', 'affiliate_commissions')
    op.drop_index('idx_affiliate_commissions_profile_status', 'affiliate_commissions')
    op.drop_index('ix_affiliate_commissions_withdraw_request_id', 'affiliate_commissions')
    op.drop_index('ix_affiliate_commissions_status', 'affiliate_commissions')
    op.drop_index('ix_affiliate_commissions_order_id', 'affiliate_commissions')
    op.drop_index('ix_affiliate_commissions_affiliate_profile_id', 'affiliate_commissions')
    op.drop_table('affiliate_commissions')

    op.drop_index('ix_affiliate_withdraw_requests_created_at', 'affiliate_withdraw_requests')
    op.drop_index('ix_affiliate_withdraw_requests_status', 'affiliate_withdraw_requests')
    op.drop_index('ix_affiliate_withdraw_requests_affiliate_profile_id', 'affiliate_withdraw_requests')
    op.drop_table('affiliate_withdraw_requests')

    op.drop_index('idx_affiliate_clicks_visitor', 'affiliate_clicks')
    op.drop_index('idx_affiliate_clicks_dedupe', 'affiliate_clicks')
    op.drop_index('ix_affiliate_clicks_created_at', 'affiliate_clicks')
    op.drop_index('ix_affiliate_clicks_affiliate_profile_id', 'affiliate_clicks')
    op.drop_table('affiliate_clicks')

    op.drop_index('ix_affiliate_profiles_status', 'affiliate_profiles')
    op.drop_index('ix_affiliate_profiles_affiliate_code', 'affiliate_profiles')
    op.drop_index('ix_affiliate_profiles_user_id', 'affiliate_profiles')
    op.drop_table('affiliate_profiles')
