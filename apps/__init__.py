"""Domain apps of the ReCore rental platform."""
