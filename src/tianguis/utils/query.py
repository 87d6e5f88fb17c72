"""Helpers for reading through Protean DAO querysets."""

BATCH_SIZE = 100


def all_items(query, batch_size: int = BATCH_SIZE) -> list:
    """Every row matching ``query``, read page by page.

    A single ``.all()`` stops at the aggregate's default limit.
    """
    items: list = []
    while True:
        batch = query.offset(len(items)).limit(batch_size).all()
        items.extend(batch.items)
        if not batch.items or len(items) >= batch.total:
            return items
