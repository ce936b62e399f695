"""LinkSaver: bookmark ingestion with full-text search."""
