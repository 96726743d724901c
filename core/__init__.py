"""Core package: exceptions, logging setup, connection registry and query gateway."""
