"""Discussion lifecycle, engagement and feed."""
