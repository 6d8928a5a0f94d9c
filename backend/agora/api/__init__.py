"""Application-wide HTTP routes and handlers."""
