"""Core infrastructure: seeded random source, data types, events, state, errors and config."""
