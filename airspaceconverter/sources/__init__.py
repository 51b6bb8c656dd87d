"""Format readers filling the airspace and waypoint collections."""
