"""Create files, categories, tags and file_tags

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the tag store schema."""
    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('filename', sa.String(1024), nullable=False),
        sa.Column('path', sa.String(4096), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
    )
    op.create_index('ix_files_filename', 'files', ['filename'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('value', sa.String(1024), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('category_id', 'value', name='uq_tags_category_value'),
    )
    op.create_index('ix_tags_category_id', 'tags', ['category_id'])

    # Surrogate id keeps insertion order for "copy previous value"
    op.create_table(
        'file_tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('file_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['file_id'], ['files.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('file_id', 'tag_id', name='uq_file_tags_file_tag'),
    )
    op.create_index('ix_file_tags_file_id', 'file_tags', ['file_id'])
    op.create_index('ix_file_tags_tag_id', 'file_tags', ['tag_id'])


def downgrade() -> None:
    """Drop the tag store schema."""
    op.drop_index('ix_file_tags_tag_id', table_name='file_tags')
    op.drop_index('ix_file_tags_file_id', table_name='file_tags')
    op.drop_table('file_tags')
    op.drop_index('ix_tags_category_id', table_name='tags')
    op.drop_table('tags')
    op.drop_table('categories')
    op.drop_index('ix_files_filename', table_name='files')
    op.drop_table('files')
