"""
MindTime: graph document engine for dated, colored mindmaps.

    core      Document model + MutationEngine (pure snapshot -> snapshot edits)
    storage   PersistenceStore over a local SQLite key-value table
    exchange  Portable .json export / import + sample document
    server    FastAPI + Socket.IO surface for the rendering layer
"""

__version__ = "1.0.0"
