"""Test suite for litsearch."""
