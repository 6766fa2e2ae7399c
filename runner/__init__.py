"""Smoke runner that probes a running jsonmock server over HTTP."""
