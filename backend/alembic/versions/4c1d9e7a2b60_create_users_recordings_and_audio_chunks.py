"""create users, recordings and audio_chunks

Revision ID: 4c1d9e7a2b60
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '4c1d9e7a2b60'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'recordings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('format', sa.String(length=20), nullable=False, server_default='webm'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ACTIVE'),
        sa.Column('total_size', sa.BigInteger(), nullable=True),
        sa.Column('duration', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recordings_user_id', 'recordings', ['user_id'])

    op.create_table(
        'audio_chunks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('recording_id', sa.Uuid(), nullable=False),
        sa.Column('chunk_index', sa.Integer(), nullable=False),
        sa.Column('audio_data', sa.LargeBinary(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('duration', sa.Float(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=False, server_default='audio/webm'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['recording_id'], ['recordings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('recording_id', 'chunk_index', name='uq_audio_chunks_recording_chunk_index'),
    )
    op.create_index('ix_audio_chunks_recording_id', 'audio_chunks', ['recording_id'])


def downgrade() -> None:
    op.drop_index('ix_audio_chunks_recording_id', table_name='audio_chunks')
    op.drop_table('audio_chunks')

    op.drop_index('ix_recordings_user_id', table_name='recordings')
    op.drop_table('recordings')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
