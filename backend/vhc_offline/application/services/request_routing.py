"""Routing table mapping VHC server URLs to cache partitions and write kinds.

Routes are evaluated in order and the first match wins, so more specific
patterns (single records) are listed before broader ones (collections,
nested paths). Only the URL path takes part in matching.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from vhc_offline.domain.entities import OperationKind, Partition


@dataclass(frozen=True)
class Route:
    """One row of the routing table."""

    pattern: re.Pattern[str]
    create_kind: OperationKind
    update_kind: OperationKind
    partition: Partition | None = None
    collection: bool = False

    def kind_for(self, method: str) -> OperationKind:
        return self.create_kind if method.upper() == "POST" else self.update_kind


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    path: str
    key: str | None = None

    @property
    def partition(self) -> Partition | None:
        return self.route.partition

    @property
    def is_collection(self) -> bool:
        return self.route.collection

    @property
    def cacheable(self) -> bool:
        """True when GET responses for this URL are mirrored into the cache."""
        return self.route.partition is not None and (self.key is not None or self.route.collection)


def route(
    pattern: str,
    create_kind: OperationKind,
    update_kind: OperationKind,
    partition: Partition | None = None,
    *,
    collection: bool = False,
) -> Route:
    return Route(re.compile(f"^{pattern}$"), create_kind, update_kind, partition, collection)


DEFAULT_ROUTES: tuple[Route, ...] = (
    route(
        r"/api/jobs/(?P<key>(?!jobs$)[^/]+)",
        OperationKind.CREATE_JOB,
        OperationKind.UPDATE_JOB,
        Partition.JOBS,
    ),
    route(
        r"/api/jobs",
        OperationKind.CREATE_JOB,
        OperationKind.UPDATE_JOB,
        Partition.JOBS,
        collection=True,
    ),
    route(r"/api/jobs/.+", OperationKind.CREATE_JOB, OperationKind.UPDATE_JOB),
    route(
        r"/api/vhc/(?P<key>[^/]+)",
        OperationKind.CREATE_VHC,
        OperationKind.UPDATE_VHC,
        Partition.VHC_DATA,
    ),
    route(r"/api/vhc(/.*)?", OperationKind.CREATE_VHC, OperationKind.UPDATE_VHC),
    route(
        r"/api/fit-finish/(?P<key>[^/]+)",
        OperationKind.CREATE_FIT_FINISH,
        OperationKind.UPDATE_FIT_FINISH,
        Partition.FIT_FINISH_DATA,
    ),
    route(
        r"/api/fit-finish(/.*)?",
        OperationKind.CREATE_FIT_FINISH,
        OperationKind.UPDATE_FIT_FINISH,
    ),
)


class RequestRouter:
    """Resolves URLs against an ordered routing table."""

    def __init__(self, routes: tuple[Route, ...] = DEFAULT_ROUTES):
        self._routes = routes

    @staticmethod
    def normalize_path(url: str) -> str:
        path = urlsplit(url).path or "/"
        return path.rstrip("/") or "/"

    def resolve(self, url: str) -> RouteMatch | None:
        path = self.normalize_path(url)
        for candidate in self._routes:
            match = candidate.pattern.match(path)
            if match is None:
                continue
            key = match.groupdict().get("key")
            return RouteMatch(candidate, path, unquote(key) if key else None)
        return None

    def classify(self, method: str, url: str) -> OperationKind:
        """Pending-operation kind for a write to url; UNKNOWN when no route matches."""
        match = self.resolve(url)
        if match is None:
            return OperationKind.UNKNOWN
        return match.route.kind_for(method)
