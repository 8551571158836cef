"""Infrastructure: SQLAlchemy adapters, audit sinks and Redis fan-out."""
