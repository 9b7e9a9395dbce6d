"""Core configuration for Waitlist Stage."""
