"""Test fixtures for the filer injector."""
