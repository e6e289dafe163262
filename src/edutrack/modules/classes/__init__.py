"""Classes module - classes of students within a grade."""
