"""Attendance module - per-lesson attendance recorded by teachers."""
