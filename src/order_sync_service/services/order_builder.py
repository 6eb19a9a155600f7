"""Builds ``UpstreamOrder`` values from raw GraphQL order nodes."""

from typing import Any

from pydantic import ValidationError

from order_sync_service.domain import UpstreamOrder
from order_sync_service.exceptions import MalformedOrderError

# Connection or list fields that upstream may send as null
_SEQUENCE_FIELDS = ("lineItems", "fulfillments", "tags")


def _flatten_connection(value: Any) -> Any:
    """Unwrap ``{"edges": [{"node": ...}]}`` into a list of nodes."""
    if isinstance(value, dict) and "edges" in value:
        edges = value.get("edges") or []
        return [edge.get("node") if isinstance(edge, dict) else edge for edge in edges]
    return value


def build_order(node: Any) -> UpstreamOrder:
    """
    Validate one order node.

    Raises:
        MalformedOrderError: if the node is not an object or fails validation
            (missing id, missing line item title, negative quantity, ...)
    """
    if not isinstance(node, dict):
        raise MalformedOrderError(f"Order node must be an object, got {type(node).__name__}")

    order_id = node.get("id") if isinstance(node.get("id"), str) else None
    data = dict(node)
    data["lineItems"] = _flatten_connection(node.get("lineItems"))
    for key in _SEQUENCE_FIELDS:
        if data.get(key) is None:
            data.pop(key, None)

    try:
        return UpstreamOrder.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MalformedOrderError(
            f"Invalid order {order_id or '<missing id>'}: {fields}", order_id=order_id
        ) from e
