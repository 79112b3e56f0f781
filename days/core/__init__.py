"""
Core utilities shared across the Day Tracker package.

This package hosts:
- configuration helpers (env vars, storage paths, remote API settings)
- the error taxonomy used by repositories and services
- the StateFlow publication primitive

Repositories and services depend on these primitives instead of reading
os.environ or defining their own observers.
"""
