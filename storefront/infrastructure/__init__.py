"""Infrastructure: configuration, database and logging."""
