"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_commands.py: create_admin / promote_admin command tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_commands.py
"""
