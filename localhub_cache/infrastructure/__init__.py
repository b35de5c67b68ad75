"""Infrastructure Layer: concrete cache tiers, storage media, config, logging, CLI."""
