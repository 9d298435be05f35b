"""
Version Diff Tests Package
==========================
Test suite for the document version-diff engine.

Run all tests: python3 -m pytest tests/diff_engine/ -v
Run specific: python3 -m pytest tests/diff_engine/test_sequence.py -v
"""
