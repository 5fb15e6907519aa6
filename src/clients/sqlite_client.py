import sqlite3
from sqlite3 import Connection


class SqliteClient:
    """SQLite database client with connection management."""

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        # Requests may be served from a different thread than the one that opened the file
        self._connection = sqlite3.connect(self.connection_string, check_same_thread=False)

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params=None):
        """Execute a read query and return all results."""
        cursor = self._connection.cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)

        results = cursor.fetchall()
        cursor.close()
        return results

    def execute_write(self, query: str, params=None) -> int:
        """Execute a write or schema statement, commit, and return the affected row count."""
        cursor = self._connection.cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        self._connection.commit()

        row_count = cursor.rowcount
        cursor.close()
        return row_count

    def close(self):
        """Close the database connection."""
        self._connection.close()
