"""add reservation_no_overlap exclusion constraint (PostgreSQL)

Revision ID: 20251112_0001
Revises: 20251110_0001
Create Date: 2025-11-12 00:01:00.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '20251112_0001'
down_revision: Union[str, None] = '20251110_0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # SQLite has no exclusion constraints; the booking service's room lock covers it there.
    if op.get_bind().dialect.name != 'postgresql':
        return
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    op.execute(
        "ALTER TABLE reservations ADD CONSTRAINT reservation_no_overlap "
        "EXCLUDE USING gist (room_id WITH =, tsrange(check_in, check_out, '[)') WITH &&) "
        "WHERE (status <> 'cancelled')"
    )


def downgrade() -> None:
    if op.get_bind().dialect.name != 'postgresql':
        return
    op.execute('ALTER TABLE reservations DROP CONSTRAINT IF EXISTS reservation_no_overlap')
