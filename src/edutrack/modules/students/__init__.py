"""Students module - enrolment and class assignment."""
