"""Baseline schema: users, subscriptions, songs, practice, AI usage, payments

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100)),
        sa.Column('avatar_url', sa.String(500)),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('plan', sa.String(20), server_default='free', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('amount', sa.Integer, server_default='0', nullable=False),
        sa.Column('currency', sa.String(3), server_default='INR', nullable=False),

        # Razorpay references
        sa.Column('razorpay_order_id', sa.String(255)),
        sa.Column('razorpay_payment_id', sa.String(255)),
        sa.Column('razorpay_signature', sa.String(255)),
        *_timestamps(),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_status', 'subscriptions', ['status'])
    op.create_index('ix_subscriptions_razorpay_order_id', 'subscriptions', ['razorpay_order_id'])
    op.create_index('ix_subscriptions_created_at', 'subscriptions', ['created_at'])

    op.create_table(
        'songs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('author_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.String(2000)),
        sa.Column('audio_url', sa.String(500), nullable=False),
        sa.Column('cover_image', sa.String(500)),
        sa.Column('duration', sa.Integer, nullable=False),
        sa.Column('genre', sa.String(50)),
        sa.Column('mood', sa.String(50)),
        sa.Column('language', sa.String(50)),
        sa.Column('tempo', sa.Integer),
        sa.Column('key', sa.String(10)),
        sa.Column('price', sa.Integer, server_default='0', nullable=False),
        sa.Column('license_type', sa.String(50)),
        sa.Column('tags', sa.String(500)),
        sa.Column('is_public', sa.Boolean, server_default=sa.true(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_songs_author_id', 'songs', ['author_id'])
    op.create_index('ix_songs_genre', 'songs', ['genre'])
    op.create_index('ix_songs_mood', 'songs', ['mood'])
    op.create_index('ix_songs_created_at', 'songs', ['created_at'])

    op.create_table(
        'practice_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('song_id', sa.String(36), sa.ForeignKey('songs.id')),
        sa.Column('session_type', sa.String(50), server_default='singing', nullable=False),
        sa.Column('duration', sa.Integer, nullable=False),
        sa.Column('pitch_score', sa.Float),
        sa.Column('rhythm_score', sa.Float),
        sa.Column('stability_score', sa.Float),
        sa.Column('overall_score', sa.Float),
        sa.Column('notes', sa.String(2000)),
        sa.Column('audio_url', sa.String(500)),
        *_timestamps(),
    )
    op.create_index('ix_practice_sessions_user_id', 'practice_sessions', ['user_id'])
    op.create_index('ix_practice_sessions_created_at', 'practice_sessions', ['created_at'])

    op.create_table(
        'ai_generations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('model', sa.String(100)),
        *_timestamps(),
    )
    op.create_index('ix_ai_generations_user_id', 'ai_generations', ['user_id'])
    op.create_index('ix_ai_generations_created_at', 'ai_generations', ['created_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('subscription_id', sa.String(36), sa.ForeignKey('subscriptions.id')),
        sa.Column('amount', sa.Integer, nullable=False),
        sa.Column('currency', sa.String(3), server_default='INR', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('type', sa.String(20), server_default='subscription', nullable=False),
        sa.Column('razorpay_order_id', sa.String(255)),
        sa.Column('razorpay_payment_id', sa.String(255)),
        sa.Column('razorpay_signature', sa.String(255)),
        sa.Column('details', sa.JSON),
        *_timestamps(),
    )
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])
    op.create_index('ix_payments_razorpay_order_id', 'payments', ['razorpay_order_id'])
    op.create_index('ix_payments_created_at', 'payments', ['created_at'])


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('ai_generations')
    op.drop_table('practice_sessions')
    op.drop_table('songs')
    op.drop_table('subscriptions')
    op.drop_table('users')
