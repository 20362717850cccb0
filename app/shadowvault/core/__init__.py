"""Core infrastructure: XDG paths and the audit journal."""
