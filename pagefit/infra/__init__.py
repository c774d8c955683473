"""Infrastructure collaborators: access gate, rate limiting, artifact storage."""
