"""Core entities: users."""
