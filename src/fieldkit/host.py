"""In-memory ``ResourceHost`` for tests and embedding without a content system."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredResource:
    kind: str
    resource_id: str
    args: Dict[str, Any] = field(default_factory=dict)
    object_type: Optional[Tuple[str, ...]] = None


class InMemoryResourceHost:
    """
    Records registered post types, taxonomies and settings pages.

    ``existing`` seeds resources the host already knows about, e.g.
    ``{"post_type": ["post", "page"]}``.

    Example:
        >>> host = InMemoryResourceHost({"post_type": ["post"]})
        >>> host.resource_exists("post_type", "post")
        True
        >>> host.register_resource("post_type", "book", {"public": True})
        >>> host.resource_exists("post_type", "book")
        True
    """

    def __init__(self, existing: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._resources: Dict[Tuple[str, str], RegisteredResource] = {}
        for kind, ids in (existing or {}).items():
            for resource_id in ids:
                self._resources[(kind, resource_id)] = RegisteredResource(kind, resource_id)

    def resource_exists(self, kind: str, resource_id: str) -> bool:
        return (kind, resource_id) in self._resources

    def register_resource(
        self,
        kind: str,
        resource_id: str,
        args: Mapping[str, Any],
        object_type: Optional[Sequence[str]] = None,
    ) -> None:
        if (kind, resource_id) in self._resources:
            logger.warning(f"{kind} '{resource_id}' registered twice, replacing")
        self._resources[(kind, resource_id)] = RegisteredResource(
            kind,
            resource_id,
            copy.deepcopy(dict(args)),
            tuple(object_type) if object_type is not None else None,
        )
        logger.debug(f"Registered {kind} '{resource_id}'")

    def get_resource(self, kind: str, resource_id: str) -> Optional[RegisteredResource]:
        return self._resources.get((kind, resource_id))

    def registered(self, kind: Optional[str] = None) -> List[RegisteredResource]:
        """Registered resources in registration order, optionally of one kind."""
        return [r for r in self._resources.values() if kind is None or r.kind == kind]


__all__ = ["RegisteredResource", "InMemoryResourceHost"]
