"""Parents module - parent profiles and their children."""
