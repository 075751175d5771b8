"""Activity logging feature."""
