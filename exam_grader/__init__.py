"""Exam grading API."""
