"""Application layer: ports and the audit pipeline services."""
