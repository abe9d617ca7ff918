"""Sinks that receive each cycle's snapshot."""
