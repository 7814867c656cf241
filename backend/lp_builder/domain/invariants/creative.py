from .exceptions import InvariantViolation

MAX_DIMENSION = 4096


def assert_dimensions(width, height):
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvariantViolation(f"{name} must be an integer")
        if not 1 <= value <= MAX_DIMENSION:
            raise InvariantViolation(
                f"{name} must be between 1 and {MAX_DIMENSION}, got {value}"
            )
