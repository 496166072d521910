"""Editor activity tracking API."""
