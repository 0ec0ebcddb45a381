"""Exam seating arrangement service: allocation, approval and seat lookup."""

__version__ = "1.0.0"
