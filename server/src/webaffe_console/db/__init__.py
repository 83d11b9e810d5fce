"""Database access for WebAffe Console."""

from webaffe_console.db.client import DatabaseClient

__all__ = ["DatabaseClient"]
