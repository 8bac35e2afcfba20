"""Entity type descriptors (field names, value kinds and free-text search markers)."""
