"""Configuration for notekeep."""
