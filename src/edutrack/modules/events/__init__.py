"""Events module - school and class events with RSVPs."""
