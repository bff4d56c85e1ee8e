"""Data models for cleanup runs."""
