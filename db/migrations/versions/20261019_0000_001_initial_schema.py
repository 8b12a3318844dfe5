"""Initial schema with users and musics tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Musics table (locator columns hold storage URLs, NULL when no file)
    op.create_table(
        'musics',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('artist', sa.String(255), nullable=False),
        sa.Column('lyrics', sa.Text(), nullable=True),
        sa.Column('audio_url', sa.String(1024), nullable=True),
        sa.Column('video_url', sa.String(1024), nullable=True),
        sa.Column('image_url', sa.String(1024), nullable=True),
        sa.Column('created_by', sa.String(255), nullable=False, server_default='system'),
        sa.Column('updated_by', sa.String(255), nullable=False, server_default='system'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_musics_created_at', 'musics', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_musics_created_at', table_name='musics')
    op.drop_table('musics')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
