"""cc: a small URL shortener backed by a single sqlite file."""
