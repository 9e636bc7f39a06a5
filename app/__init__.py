"""IdleWatch: idle AWS resource scanner."""
