"""Errors, clock, ports and application state shared by the engine."""
