"""add_booking_and_invite_code_constraints

Revision ID: 8d4e6b2f1a37
Revises: 3f1c2a9e7b10
Create Date: 2026-10-12 11:02:09.734811

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4e6b2f1a37'
down_revision: Union[str, None] = '3f1c2a9e7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Due prenotazioni confermate dal gestore e non cancellate non possono
    # sovrapporsi sullo stesso campo. Intervalli semiaperti: [start, end)
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")
    op.execute("""
        ALTER TABLE bookings
        ADD CONSTRAINT excl_bookings_confirmed_court_overlap
        EXCLUDE USING gist (
            court WITH =,
            tsrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (manager_confirmed AND status <> 'cancelled');
    """)

    op.create_check_constraint(
        'ck_bookings_end_after_start',
        'bookings',
        'end_time > start_time',
    )

    # NULL = codice illimitato
    op.create_check_constraint(
        'ck_invite_codes_uses_remaining',
        'invite_codes',
        'uses_remaining IS NULL OR uses_remaining >= 0',
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('ck_invite_codes_uses_remaining', 'invite_codes', type_='check')
    op.drop_constraint('ck_bookings_end_after_start', 'bookings', type_='check')
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS excl_bookings_confirmed_court_overlap;")
