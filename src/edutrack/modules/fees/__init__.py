"""Fees module - fee structures, breakdown items and per-student overrides."""
