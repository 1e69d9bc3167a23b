"""Hit queueing, batch planning and dispatch."""
