"""Location, weather and time context."""
