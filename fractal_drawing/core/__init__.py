"""Core arithmetic, parameters and escape-time evaluation."""
