"""
Day Tracker storage core.

Calendars of colored days, persisted as JSON documents in a key-value store,
with an optional remote API for calendar CRUD.
"""
