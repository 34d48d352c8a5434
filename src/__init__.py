"""Source package marker for the Camco fit check library."""
