"""Command-line client for notekeep."""
