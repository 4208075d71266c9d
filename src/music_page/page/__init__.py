"""HTML page rendering and publishing."""
