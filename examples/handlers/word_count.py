"""Counts whitespace-separated words."""


def handler(payload):
    return {"count": len(payload["text"].split())}
