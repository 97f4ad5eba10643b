"""
Backup synchronization for the fitness app.

The sync client keeps named snapshots of the app's persisted state in a local
key-value store and mirrors them to a backup API; this package also provides
that API as a FastAPI application with in-memory and SQLAlchemy storage.
"""
