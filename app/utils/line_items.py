from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode


def validate_line_items(items) -> dict[int, int]:
    """Return {product_id: quantity}, rejecting empty or repeated lines."""
    if not items:
        raise AppException(
            400,
            "At least one line item is required",
            ErrorCode.EMPTY_LINE_ITEMS,
        )

    quantities: dict[int, int] = {}
    for item in items:
        if item.product_id in quantities:
            raise AppException(
                400,
                f"Product {item.product_id} appears more than once",
                ErrorCode.DUPLICATE_LINE_ITEM,
                details={"product_id": item.product_id},
            )
        if item.quantity is None or item.quantity <= 0:
            raise AppException(
                400,
                "Line quantity must be greater than zero",
                ErrorCode.VALIDATION_ERROR,
                details={"product_id": item.product_id},
            )
        quantities[item.product_id] = item.quantity

    return quantities


def diff_quantities(old: dict[int, int], new: dict[int, int]) -> dict[int, int]:
    """Per-product new minus old; removed products carry their negated old quantity."""
    diff = {}
    for product_id in list(old) + [p for p in new if p not in old]:
        change = new.get(product_id, 0) - old.get(product_id, 0)
        if change:
            diff[product_id] = change
    return diff
