"""Operational scripts for Waitlist Stage."""
