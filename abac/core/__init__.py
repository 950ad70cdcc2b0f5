"""Core infrastructure: configuration, logging, errors and the decision engine."""
