"""HTTP control surface for the replay engine."""
