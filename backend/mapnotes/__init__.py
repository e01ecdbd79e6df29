"""
Map Notes Backend — Application Package Initializer
=====================================================

What: JSON backend for the property map: list notes, add a note.
Who:  Imported by uvicorn (mapnotes.main:app), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP dispatch, JSON envelopes
    ├─────────────────────────────────────┤
    │       NoteService (Handlers)        │  ← Header skip, validation, timestamps
    ├─────────────────────────────────────┤
    │     TableAccessor (Storage Seam)    │  ← read rows / append row
    ├─────────────────────────────────────┤
    │  database │ csv workbook │ memory   │  ← Concrete sheet backends
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
