"""Integration tests for edinet-facts.

Integration tests validate components with external dependencies:
- Real MongoDB connections
- File system operations

Run with: pytest tests/integration/ -v -s
"""
