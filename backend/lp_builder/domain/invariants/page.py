from .exceptions import InvariantViolation


def assert_page(page):
    orders = [section.order for section in page.sections]
    expected = list(range(len(orders)))

    if sorted(orders) != expected:
        raise InvariantViolation(
            f"Section orders are not consecutive starting from 0: {orders}"
        )
