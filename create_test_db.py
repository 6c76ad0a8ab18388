#!/usr/bin/env python3
"""Create a SQLite test database shaped like a Mendix application database."""

import sqlite3
import os
import sys


def create_tables(cursor):
    """Create application, junction and platform tables."""

    # Application entities
    cursor.execute('''
        CREATE TABLE customer (
            id INTEGER PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            email VARCHAR(255)
        )
    ''')

    cursor.execute('''
        CREATE TABLE "order" (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER,
            total DECIMAL(10,2) DEFAULT 0,
            FOREIGN KEY (customer_id) REFERENCES customer (id)
        )
    ''')

    cursor.execute('''
        CREATE TABLE order_line (
            order_id INTEGER NOT NULL,
            line_no INTEGER NOT NULL,
            product VARCHAR(100),
            PRIMARY KEY (order_id, line_no),
            CONSTRAINT fk_order_line_order FOREIGN KEY (order_id) REFERENCES "order" (id)
        )
    ''')

    # Many-to-many association between customer and order
    cursor.execute('''
        CREATE TABLE "mod$customer_order" (
            customer_id INTEGER NOT NULL REFERENCES customer (id),
            order_id INTEGER NOT NULL REFERENCES "order" (id),
            PRIMARY KEY (customer_id, order_id)
        )
    ''')

    # Platform tables, filtered out unless system tables are requested
    cursor.execute('''
        CREATE TABLE "system$user" (
            id INTEGER PRIMARY KEY,
            name VARCHAR(100)
        )
    ''')

    cursor.execute('''
        CREATE TABLE mxsequence (
            name VARCHAR(100) PRIMARY KEY,
            value INTEGER
        )
    ''')


def create_test_database(db_path: str = "test_mendix.db") -> str:
    """Create the test database at ``db_path``, replacing an existing one."""
    if os.path.exists(db_path):
        os.remove(db_path)

    conn = sqlite3.connect(db_path)
    try:
        create_tables(conn.cursor())
        conn.commit()
    finally:
        conn.close()

    return db_path


if __name__ == "__main__":
    path = create_test_database(sys.argv[1] if len(sys.argv) > 1 else "test_mendix.db")
    print(f"Created test database: {path}")
    print(f"Export it with: jcatalog-export sqlite:///{path} '' '' test_mendix.jcatalog")
