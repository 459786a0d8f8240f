"""MentorMatch: pairs clients on parole or probation with volunteer mentors."""

__version__ = "0.1.0"
