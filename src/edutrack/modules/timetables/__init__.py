"""Timetables module - weekly timetables, slots and schedule conflict checks."""
