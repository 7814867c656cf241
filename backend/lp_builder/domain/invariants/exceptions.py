class InvariantViolation(Exception):
    """A domain rule was broken by the requested change."""
