"""
Test suite for the ArtisanConnect backend.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run the API tests: pytest tests/test_api.py -v
"""
