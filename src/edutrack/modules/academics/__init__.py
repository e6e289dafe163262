"""Academics module - academic years, terms, grades, subjects and lessons."""
