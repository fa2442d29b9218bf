"""Infrastructure: database plumbing and repository implementations."""
