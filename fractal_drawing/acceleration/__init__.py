"""Parallel tile scheduling and progress tracking."""
