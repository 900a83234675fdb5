"""Concrete adapters, configuration and wiring."""
