"""Decision events emitted by the migration runner."""
