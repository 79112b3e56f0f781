"""Domain types and helpers (colors, calendars, documents)."""
