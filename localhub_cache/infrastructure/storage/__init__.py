"""Storage media backing the slow cache tiers (disk, memory, unavailable)."""
