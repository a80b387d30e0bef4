"""Bot state -- in-memory chat sessions and the persisted user allowlist."""
