"""HTTP layer for notekeep."""
