# utils/db.py
import logging
import sqlite3

log = logging.getLogger("db")

COLUMNS = ("ts", "user_id", "exchange", "fiat_amount", "expected_amount",
           "matched_amount", "status", "attempts")


def _cell(value):
    # Decimal храним строкой, чтобы не терять точность
    if value is None or isinstance(value, int):
        return value
    return str(value)


def init_sqlite(path="payments.db"):
    conn = sqlite3.connect(path)
    cur = conn.cursor()
    cur.execute("""
        CREATE TABLE IF NOT EXISTS payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            ts TEXT,
            user_id INTEGER,
            exchange TEXT,
            fiat_amount TEXT,
            expected_amount TEXT,
            matched_amount TEXT,
            status TEXT,
            attempts INTEGER
        );
    """)
    conn.commit()
    conn.close()


def log_to_sqlite(row: dict, path="payments.db"):
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        cur.execute(f"""
            INSERT INTO payments ({", ".join(COLUMNS)})
            VALUES ({", ".join("?" for _ in COLUMNS)});
        """, tuple(_cell(row.get(c)) for c in COLUMNS))
        conn.commit()
    finally:
        conn.close()


def make_journal(path="payments.db"):
    """Функция записи исхода сессии; ошибки SQLite не должны влиять на сессию."""
    def journal(row: dict):
        try:
            log_to_sqlite(row, path)
        except sqlite3.Error as e:
            log.error(f"SQLite journal append failed: {e}")
    return journal


def read_payments(path="payments.db"):
    conn = sqlite3.connect(path)
    try:
        cur = conn.execute(f"SELECT {', '.join(COLUMNS)} FROM payments ORDER BY id")
        return [dict(zip(COLUMNS, r)) for r in cur.fetchall()]
    finally:
        conn.close()
