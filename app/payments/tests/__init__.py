"""
Tests for payments app.

This package contains test modules for:
- test_models.py: Transaction constraints and immutability
- test_signatures.py: Callback and status-query signatures
- test_callbacks.py: Callback and status-query normalization
- test_commands.py: check_pending_payments management command
- test_integration.py: Callback and poller journeys end to end

Usage:
    pytest payments/tests/
    pytest payments/tests/test_integration.py
"""
