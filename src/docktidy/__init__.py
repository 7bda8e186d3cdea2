"""docktidy: inspect Docker disk usage and safely prune unused resources."""
