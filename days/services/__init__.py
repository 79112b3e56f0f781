"""
High-level use cases for the Day Tracker core.

Each service module orchestrates repositories/adapters to implement business
rules (color a day, manage calendars, authenticate against the remote API).
"""
