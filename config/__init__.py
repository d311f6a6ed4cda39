"""Settings for the track resolver."""
