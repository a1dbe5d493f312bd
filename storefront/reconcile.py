# storefront/reconcile.py
"""Apply a confirmed create/update/delete to a list without re-fetching it."""
from enum import Enum
from typing import Any, List, Sequence


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def reconcile(items: Sequence[Any], result: Any, kind: MutationKind) -> List[Any]:
    """
    Return a new list reflecting a mutation the backend already accepted.

    ``result`` is the returned entity for create/update and the bare id for
    delete (deletes usually come back with no body). An update whose id is
    not in the list is appended, which covers a save that lands before the
    first fetch did.
    """
    kind = MutationKind(kind)
    if kind is MutationKind.DELETE:
        return [item for item in items if item.id != result]
    if kind is MutationKind.UPDATE:
        updated = list(items)
        for i, item in enumerate(updated):
            if item.id == result.id:
                updated[i] = result
                return updated
        updated.append(result)
        return updated
    return [*items, result]
