"""
GIGO Test Suite
===============

Run all tests:
    pytest tests/ -v

Run with coverage:
    pytest tests/ --cov=gigo --cov-report=html

These tests mock every provider and host surface; no API key or running
model server is needed.
"""
