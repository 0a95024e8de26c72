"""Infrastructure layer: persistence, security, notification adapters."""
