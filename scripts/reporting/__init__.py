"""Crosscheck metrics file output."""
