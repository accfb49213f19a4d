"""
Test suite for the FedSpace scoring engines.

Unit tests run entirely in memory; the SQL store tests use SQLite, so no
PostgreSQL or Redis is required.

Usage:
    pytest tests/
"""
