"""Adds two numbers."""


async def handler(payload):
    try:
        a = float(payload["a"])
        b = float(payload["b"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Inputs a and b must be numbers.") from exc
    total = a + b
    return {"sum": int(total) if total.is_integer() else total}
