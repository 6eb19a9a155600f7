"""In-run dedup index of upstream order ids."""


class DedupIndex:
    """Upstream ids already queued for write by one orchestrator instance.

    Lives only as long as its orchestrator; a new full sync gets a new index.
    Saves a store round trip when upstream pagination repeats an id.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def seen(self, order_id: str) -> bool:
        return order_id in self._ids

    def mark(self, order_id: str) -> None:
        self._ids.add(order_id)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)
