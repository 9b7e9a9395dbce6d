"""Database helpers for Waitlist Stage."""
