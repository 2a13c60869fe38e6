"""Core infrastructure: bootstrap, clock, errors, logging, signals."""
