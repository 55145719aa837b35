"""Tests for the weather logger."""
