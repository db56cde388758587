"""Source and destination collaborators."""
