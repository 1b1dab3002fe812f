"""Test suite for asicsmith."""
