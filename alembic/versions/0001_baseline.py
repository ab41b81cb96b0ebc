"""Baseline migration - listings, responses, confirmations

Revision ID: 0001_baseline
Revises: 
Create Date: 2026-10-19

Creates the six listing tables plus the engagement tables shared by all
listing types.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


LISTING_TABLES = ('service', 'ad', 'rent', 'rent_ad', 'work', 'work_ad')


def upgrade() -> None:
    """Create listing and engagement tables."""

    # ==========================================================================
    # Listings (one table per type, shared layout)
    # ==========================================================================
    for table in LISTING_TABLES:
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(255), nullable=False),
            sa.Column('price', sa.Numeric(12, 2), nullable=True),
            sa.Column('status', sa.String(20), server_default='active', nullable=False),
            sa.Column('top', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])

    # ==========================================================================
    # Responses
    # ==========================================================================
    op.create_table(
        'listing_responses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('listing_type', sa.String(20), nullable=False),
        sa.Column('listing_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('listing_type', 'listing_id', 'user_id', name='uq_response_listing_user'),
    )
    op.create_index('ix_listing_responses_listing', 'listing_responses', ['listing_type', 'listing_id'])

    # ==========================================================================
    # Confirmations
    # ==========================================================================
    op.create_table(
        'listing_confirmations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('listing_type', sa.String(20), nullable=False),
        sa.Column('listing_id', sa.Integer(), nullable=False),
        sa.Column('chat_id', sa.Integer(), nullable=True),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('performer_id', sa.Integer(), nullable=False),
        sa.Column('confirmed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_listing_confirmations_listing', 'listing_confirmations', ['listing_type', 'listing_id'])
    op.create_index('ix_listing_confirmations_performer', 'listing_confirmations', ['performer_id'])
    # Only one confirmed row allowed per listing
    op.create_index(
        'uq_one_confirmed_per_listing',
        'listing_confirmations',
        ['listing_type', 'listing_id'],
        unique=True,
        postgresql_where=sa.text('confirmed'),
        sqlite_where=sa.text('confirmed'),
    )

    # ==========================================================================
    # Collaborators
    # ==========================================================================
    op.create_table(
        'chats',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_low_id', sa.Integer(), nullable=False),
        sa.Column('user_high_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='uq_chat_user_pair'),
    )

    op.create_table(
        'listing_reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('listing_type', sa.String(20), nullable=False),
        sa.Column('listing_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('listing_type', 'listing_id', 'user_id', name='uq_review_listing_user'),
    )
    op.create_index('ix_listing_reviews_listing', 'listing_reviews', ['listing_type', 'listing_id'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('listing_reviews')
    op.drop_table('chats')
    op.drop_index('uq_one_confirmed_per_listing', table_name='listing_confirmations')
    op.drop_table('listing_confirmations')
    op.drop_table('listing_responses')
    for table in reversed(LISTING_TABLES):
        op.drop_table(table)
