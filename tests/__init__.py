"""
Tests for spec-oracle.

Test suite covering:
- Unit tests for individual components
- Integration tests for call classification and the CLI
"""

__all__ = []
