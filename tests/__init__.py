"""
Tests Package - Unit Tests

Test structure:
- tests/unit/ - Fast, isolated unit tests (no PostgreSQL or S3 required)
- tests/conftest.py - Shared pytest fixtures (in-memory source database,
  mocked S3 client, settings)
"""
