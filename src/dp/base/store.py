from abc import ABC, abstractmethod


class Store(ABC):
    """
    Store defines how statements reach the underlying relational database.

    Statements arrive fully rendered; a Store owns the connection, literal
    escaping and the identity generated by the last INSERT.
    """

    @abstractmethod
    def execute(self, sql: str):
        """
        Execute one statement and return its cursor.

        The cursor yields rows as dicts through fetchone() (None at the end),
        exposes rowcount and must be closed by the caller.
        Raises StoreError when the statement fails.
        """
        pass

    @abstractmethod
    def escape(self, text: str) -> str:
        """
        Escape text for use inside a single-quoted SQL literal.
        """
        pass

    @abstractmethod
    def last_insert_id(self) -> int:
        """Identity generated by the last INSERT, 0 if none."""
        pass

    def close(self) -> None:
        pass
