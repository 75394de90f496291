"""Spaced-repetition word scheduling for the Hebrew/English vocabulary trainer."""

__version__ = "0.3.0"
