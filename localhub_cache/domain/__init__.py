"""Domain Layer: cache entry models and the ports infrastructure implements."""
