"""Teachers module - teacher profiles and verification."""
