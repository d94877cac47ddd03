"""Weather-sensitive construction scheduling engine."""
