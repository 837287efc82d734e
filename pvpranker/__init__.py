"""pvpranker: cup and bracket rankings from simulated pairwise battles."""
