"""Tests for the hierarchy package."""
