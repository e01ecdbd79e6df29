# Services package init
"""
Map Notes Backend — Services Layer
====================================

Service Inventory:
    - TableAccessor (abstract): read rows / append row on one named sheet
    - DatabaseTableAccessor, CsvTableAccessor, MemoryTableAccessor: backends
    - get_table: FastAPI dependency choosing the backend from settings
    - NoteService: list and add handlers over a TableAccessor
"""
