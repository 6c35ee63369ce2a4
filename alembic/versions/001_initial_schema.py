"""Initial catalog schema: authors, books, book_genres, users, user_sessions.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'authors',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('born', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'books',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False, unique=True),
        sa.Column('published', sa.Integer(), nullable=False),
        sa.Column(
            'author_id', postgresql.UUID(as_uuid=True),
            sa.ForeignKey('authors.id'), nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_books_author_id', 'books', ['author_id'])
    op.create_table(
        'book_genres',
        sa.Column(
            'book_id', postgresql.UUID(as_uuid=True),
            sa.ForeignKey('books.id'), primary_key=True,
        ),
        sa.Column('position', sa.Integer(), primary_key=True),
        sa.Column('genre', sa.String(100), nullable=False),
    )
    op.create_index('ix_book_genres_genre', 'book_genres', ['genre'])
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('favorite_genre', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'user_sessions',
        sa.Column('token_hash', sa.String(64), primary_key=True),
        sa.Column(
            'user_id', postgresql.UUID(as_uuid=True),
            sa.ForeignKey('users.id'), nullable=False,
        ),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('user_sessions')
    op.drop_table('users')
    op.drop_index('ix_book_genres_genre', table_name='book_genres')
    op.drop_table('book_genres')
    op.drop_index('ix_books_author_id', table_name='books')
    op.drop_table('books')
    op.drop_table('authors')
