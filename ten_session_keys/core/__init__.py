"""Core session key subsystem: state store, lifecycle manager, transaction execution."""
