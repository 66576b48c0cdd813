"""Infrastructure services: adapters to external systems (OAuth providers, browser sessions)."""
