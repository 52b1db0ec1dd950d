"""Script to purge stored Trakt OAuth tokens from SQLite."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import aiosqlite


async def clear_tokens(
    sqlite_path: str | Path = "./trakt_tokens.db",
    username: Optional[str] = None,
) -> None:
    """Remove stored tokens, for every user or only ``username``.

    The default path mirrors the application default; tests inject temporary
    paths so the script can run against disposable databases.
    """

    db_path = Path(sqlite_path)
    if not db_path.exists():
        print("! SQLite database not found (this is normal if nobody has authorized yet)")
        return

    try:
        async with aiosqlite.connect(db_path) as db:
            if username:
                cursor = await db.execute("DELETE FROM tokens WHERE trakt_username = ?", (username,))
            else:
                cursor = await db.execute("DELETE FROM tokens")
            await db.commit()
            removed = cursor.rowcount
    except aiosqlite.Error as exc:
        print(f"! Failed to clear SQLite tokens: {exc}")
        return

    target = f"user {username}" if username else "all users"
    print(f"✓ Cleared {removed} token row(s) for {target} ({db_path})")


if __name__ == "__main__":
    asyncio.run(clear_tokens(username=sys.argv[1] if len(sys.argv) > 1 else None))
