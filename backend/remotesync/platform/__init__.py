"""Provider adapters and the sync workflow."""
