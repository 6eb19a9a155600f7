"""Create documents table

Revision ID: 5d2c7a1e9f40
Revises:
Create Date: 2026-10-12 09:00:00.000000+00:00

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5d2c7a1e9f40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('documents',
    sa.Column('id', sa.String(length=32), nullable=False),
    sa.Column('collection', sa.String(length=100), nullable=False),
    sa.Column('data', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_documents_collection', 'documents', ['collection'], unique=False)

    # Existence checks and job lookups filter on (collection, data->>'id').
    # Not unique: duplicates are prevented by the read-before-write gate.
    op.execute("""
        CREATE INDEX ix_documents_collection_data_id
        ON documents (collection, (data ->> 'id'))
    """)

    # Read path orders stored orders by upstream creation time
    op.execute("""
        CREATE INDEX ix_documents_collection_created_at
        ON documents (collection, (data ->> 'createdAt') DESC)
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS ix_documents_collection_created_at")
    op.execute("DROP INDEX IF EXISTS ix_documents_collection_data_id")
    op.drop_index('ix_documents_collection', table_name='documents')
    op.drop_table('documents')
