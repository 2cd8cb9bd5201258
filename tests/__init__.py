"""Tests for lsptree."""
