"""HTTP and websocket API for Waitlist Stage."""
