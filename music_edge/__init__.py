"""Request-forwarding edge layer for the music player frontend."""
