import json
import os
import sqlite3
import sys

from tabulate import tabulate

from botrouter.database.settings_store import SERVERS_COLLECTION

DB_DIR = "settings"


def list_collections(conn):
    """Return the collection names stored in the database."""
    cursor = conn.cursor()
    cursor.execute("SELECT DISTINCT collection FROM records ORDER BY collection;")
    return [row[0] for row in cursor.fetchall()]


def view_collection(conn, collection, limit=50):
    """Return rows and headers for a given collection."""
    cursor = conn.cursor()
    cursor.execute(
        "SELECT key, value, updated_on FROM records WHERE collection = ? ORDER BY key LIMIT ?;",
        (collection, limit),
    )
    rows = cursor.fetchall()
    if collection != SERVERS_COLLECTION:
        return ["key", "value", "updated_on"], rows

    decoded = []
    for key, value, updated_on in rows:
        try:
            record = json.loads(value)
            decoded.append((key, record.get("Prefix"), record.get("GuildID"), updated_on))
        except (ValueError, AttributeError):
            decoded.append((key, "<unreadable>", value, updated_on))
    return ["key", "Prefix", "GuildID", "updated_on"], decoded


def inspect_database(db_path):
    """Print all collections and their content."""
    print(f"\n📂 Inspecting database: {os.path.basename(db_path)}")

    conn = sqlite3.connect(db_path)
    try:
        collections = list_collections(conn)
    except sqlite3.Error as e:
        print(f"   ⚠️  Not a settings database: {e}")
        conn.close()
        return

    if not collections:
        print("   ⚠️  No records found in this database.")
        conn.close()
        return

    for collection in collections:
        print(f"\n📊 Collection: {collection}")
        headers, rows = view_collection(conn, collection)
        print(tabulate(rows, headers=headers, tablefmt="fancy_grid"))

    conn.close()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    db_dir = argv[0] if argv else DB_DIR

    if not os.path.exists(db_dir):
        print(f"❌ Database directory not found: {db_dir}")
        return 1

    db_files = sorted(f for f in os.listdir(db_dir) if f.endswith(".db"))
    if not db_files:
        print(f"⚠️ No .db files found in {db_dir}")
        return 1

    for db_file in db_files:
        inspect_database(os.path.join(db_dir, db_file))
    return 0


if __name__ == "__main__":
    sys.exit(main())
