"""Database-backed ThreadStore adapters."""
