"""
Keys that make a company create safe to resubmit.

A caller passing the same request id twice (a double-submitted form, a
client retry after a timeout) gets back the company stored the first time.
The key lands in ``companies.idempotency_key``, which is unique.
"""

from uuid import UUID

KEY_SEPARATOR = ":"


def generate_idempotency_key(producer: str, action: str, request_id: UUID | str) -> str:
    """``producer:action:request_id``, e.g. ``multi_company:company.create:req-1``."""
    return KEY_SEPARATOR.join((producer, action, str(request_id)))


def parse_idempotency_key(key: str) -> tuple[str, str, str]:
    """Split a key back into (producer, action, request_id); the request id may itself hold colons."""
    producer, sep1, rest = key.partition(KEY_SEPARATOR)
    action, sep2, request_id = rest.partition(KEY_SEPARATOR)
    if not (sep1 and sep2):
        raise ValueError(f"Malformed idempotency key: {key!r}")
    return producer, action, request_id
