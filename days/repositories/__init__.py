"""
Persistence adapters.

These modules encapsulate how data is stored/retrieved (JSON file, SQL table
or memory) and how the calendar document is encoded. Services depend on the
DataRepository interface rather than touching a store.
"""
