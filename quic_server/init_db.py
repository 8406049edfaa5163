import argparse
import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    username TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS folders (
    folder_id INTEGER PRIMARY KEY AUTOINCREMENT,
    folder_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sets (
    set_id INTEGER PRIMARY KEY AUTOINCREMENT,
    set_name TEXT NOT NULL,
    set_description TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS cards (
    card_id INTEGER PRIMARY KEY AUTOINCREMENT,
    front TEXT NOT NULL DEFAULT '',
    back TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS user_folders (
    user_id INTEGER NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
    folder_id INTEGER NOT NULL REFERENCES folders (folder_id) ON DELETE CASCADE,
    PRIMARY KEY (user_id, folder_id)
);

CREATE TABLE IF NOT EXISTS folder_sets (
    folder_id INTEGER NOT NULL REFERENCES folders (folder_id) ON DELETE CASCADE,
    set_id INTEGER NOT NULL REFERENCES sets (set_id) ON DELETE CASCADE,
    PRIMARY KEY (folder_id, set_id)
);

CREATE TABLE IF NOT EXISTS set_cards (
    set_id INTEGER NOT NULL REFERENCES sets (set_id) ON DELETE CASCADE,
    card_id INTEGER NOT NULL REFERENCES cards (card_id) ON DELETE CASCADE,
    PRIMARY KEY (set_id, card_id)
);

/* A user may not own two folders with the same name */
CREATE TRIGGER IF NOT EXISTS user_folders_unique_name
BEFORE INSERT ON user_folders
WHEN EXISTS (
    SELECT 1
    FROM user_folders uf
    JOIN folders f ON f.folder_id = uf.folder_id
    WHERE uf.user_id = NEW.user_id
      AND f.folder_name = (SELECT folder_name FROM folders WHERE folder_id = NEW.folder_id)
)
BEGIN
    SELECT RAISE(ABORT, 'UNIQUE constraint failed: user_folders.folder_name');
END;

/* A folder may not contain two sets with the same name */
CREATE TRIGGER IF NOT EXISTS folder_sets_unique_name
BEFORE INSERT ON folder_sets
WHEN EXISTS (
    SELECT 1
    FROM folder_sets fs
    JOIN sets s ON s.set_id = fs.set_id
    WHERE fs.folder_id = NEW.folder_id
      AND s.set_name = (SELECT set_name FROM sets WHERE set_id = NEW.set_id)
)
BEGIN
    SELECT RAISE(ABORT, 'UNIQUE constraint failed: folder_sets.set_name');
END;
"""


def initialize_database(db_path):
    """Initializes the QuiC database and creates all tables and triggers if they don't exist."""
    db_dir = os.path.dirname(os.path.abspath(db_path))
    os.makedirs(db_dir, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    logger.info(f"Database '{db_path}' initialized.")


if __name__ == '__main__':
    from quic_server.config import Config

    parser = argparse.ArgumentParser(description="Create the QuiC database schema.")
    parser.add_argument('--database', default=Config.DATABASE_PATH,
                        help="SQLite file to initialize (defaults to DATABASE_PATH)")
    args = parser.parse_args()
    if not args.database:
        parser.error("No database path given and DATABASE_PATH is not set")

    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s')
    initialize_database(args.database)
