"""Core domain primitives: configuration, errors, DTOs, time helpers."""
