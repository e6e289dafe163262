"""Rooms module - rooms, availability and utilization."""
