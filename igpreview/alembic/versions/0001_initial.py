"""initial

Revision ID: 0001
Revises: 
Create Date: 2025-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('feeds',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_table('photos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('feed_id', sa.String(36), sa.ForeignKey('feeds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('storage_path', sa.String(), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_photos_feed_id', 'photos', ['feed_id'])
    op.create_table('previews',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('feed_id', sa.String(36), sa.ForeignKey('feeds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(128), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_previews_feed_id', 'previews', ['feed_id'])
    op.create_index('ix_previews_token', 'previews', ['token'], unique=True)

def downgrade():
    op.drop_table('previews')
    op.drop_table('photos')
    op.drop_table('feeds')
