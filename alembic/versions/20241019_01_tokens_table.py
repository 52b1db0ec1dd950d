"""Create the Trakt OAuth tokens table"""
from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection

# revision identifiers, used by Alembic.
revision = "20241019_01_tokens_table"
down_revision = None
branch_labels = None
depends_on = None

# UTC with millisecond precision so back-to-back updates stay ordered.
NOW_SQL = "strftime('%Y-%m-%d %H:%M:%f', 'now')"


def upgrade() -> None:
    from alembic import op  # type: ignore

    apply_schema(op.get_bind())


def apply_schema(connection: Connection) -> None:
    """Create the tokens table and (re)create its ``updated_at`` trigger.

    An existing tokens table is adopted as-is. Any earlier trigger of the same
    name is replaced so every database ends up with the column-scoped one.
    """

    connection.execute(
        text(
            f"""
            CREATE TABLE IF NOT EXISTS tokens (
                trakt_username TEXT PRIMARY KEY,
                access_token TEXT NOT NULL,
                refresh_token TEXT NOT NULL,
                expires_at INTEGER NOT NULL,
                created_at DATETIME DEFAULT ({NOW_SQL}),
                updated_at DATETIME DEFAULT ({NOW_SQL})
            )
            """
        )
    )

    connection.execute(text("DROP TRIGGER IF EXISTS update_tokens_updated_at"))

    connection.execute(
        text(
            f"""
            CREATE TRIGGER update_tokens_updated_at
            AFTER UPDATE OF access_token, refresh_token, expires_at ON tokens
            FOR EACH ROW
            BEGIN
                UPDATE tokens SET updated_at = {NOW_SQL}
                 WHERE trakt_username = OLD.trakt_username;
            END;
            """
        )
    )


def downgrade() -> None:
    from alembic import op  # type: ignore

    connection = op.get_bind()
    connection.execute(text("DROP TRIGGER IF EXISTS update_tokens_updated_at"))
    connection.execute(text("DROP TABLE IF EXISTS tokens"))
