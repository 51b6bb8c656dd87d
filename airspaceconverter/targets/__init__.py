"""Format writers serializing the airspace and waypoint collections."""
