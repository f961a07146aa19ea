"""
End-to-end test suite for the payroll bill extractor.

These tests drive the full pipeline and the CLI over synthetic bill pages;
only PDF token extraction is patched where a real PDF would be needed.
"""
