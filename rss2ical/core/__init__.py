"""Infrastructure helpers: configuration, shared HTTP client, clock."""
