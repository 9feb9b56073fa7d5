"""Pipeline services: aggregation, sorting, projection, view transitions, sessions."""
