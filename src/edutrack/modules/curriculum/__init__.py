"""Curriculum module - curricula, learning objectives and student progress."""
