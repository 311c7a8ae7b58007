"""Hotel billing backend: order aggregation and bill finalization."""
