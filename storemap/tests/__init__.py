"""Store Map test suite."""
