"""
Tests package - Test suite for the filer injector.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Sample pods, secrets and the sidecar template
"""
