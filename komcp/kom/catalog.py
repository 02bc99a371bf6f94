"""Discovery data about a cluster's API resources and CRDs, and lookups over it."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from komcp.utils.cache import TTLCache, get_or_set
from komcp.utils.unstructured import nested_get

logger = logging.getLogger(__name__)

_CRD_CACHE_KEY = "crdList"


@dataclass(frozen=True)
class GroupVersionKind:
    group: str = ""
    version: str = ""
    kind: str = ""


@dataclass(frozen=True)
class GroupVersionResource:
    group: str = ""
    version: str = ""
    resource: str = ""


@dataclass
class APIResource:
    """A resource type served by the API."""

    name: str
    singular_name: str = ""
    namespaced: bool = False
    kind: str = ""
    short_names: list[str] = field(default_factory=list)
    group: str = ""
    version: str = ""


@dataclass
class APIResourceList:
    """The resources served under one group/version."""

    group_version: str
    resources: list[APIResource] = field(default_factory=list)


def build_api_resources(lists: Iterable[APIResourceList]) -> list[APIResource]:
    """Flatten resource lists, stamping each resource with its group and version."""
    result = []
    for resource_list in lists:
        parts = resource_list.group_version.split("/")
        if len(parts) == 2:
            group, version = parts
        else:
            group, version = "", resource_list.group_version
        result.extend(dataclasses.replace(r, group=group, version=version) for r in resource_list.resources)
    return result


def gvk_from_obj(obj: Any) -> GroupVersionKind:
    """Read the group, version and kind from a resource object."""
    if not isinstance(obj, Mapping):
        raise TypeError(f"unsupported type {type(obj).__name__}")
    api_version = obj.get("apiVersion") or ""
    kind = obj.get("kind") or ""
    if not isinstance(api_version, str) or not isinstance(kind, str):
        return GroupVersionKind()
    parts = api_version.split("/") if api_version else []
    if len(parts) == 0:
        return GroupVersionKind(kind=kind)
    if len(parts) == 1:
        return GroupVersionKind(version=parts[0], kind=kind)
    if len(parts) == 2:
        return GroupVersionKind(group=parts[0], version=parts[1], kind=kind)
    return GroupVersionKind()


def gvr_from_crd(crd: Mapping[str, Any]) -> GroupVersionResource:
    """Build the resource coordinates from a CRD: group, first version, plural."""
    try:
        spec = crd["spec"]
        group = spec["group"]
        version = spec["versions"][0]["name"]
        plural = spec["names"]["plural"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError(f"malformed CRD: {exc}") from exc
    if not all(isinstance(v, str) for v in (group, version, plural)):
        raise ValueError("malformed CRD: group, version and plural must be strings")
    return GroupVersionResource(group=group, version=version, resource=plural)


def select_gvk(gvks: Sequence[GroupVersionKind], version: Optional[str] = None) -> GroupVersionKind:
    """Pick the GVK with ``version``, or the first one when no version is given."""
    if not gvks:
        return GroupVersionKind()
    if version is None:
        return gvks[0]
    return next((g for g in gvks if g.version == version), GroupVersionKind())


def _nested_str(obj: Mapping[str, Any], *path: str) -> Optional[str]:
    try:
        value = nested_get(obj, *path)
    except (KeyError, TypeError):
        return None
    return value if isinstance(value, str) else None


def _nested_str_list(obj: Mapping[str, Any], *path: str) -> list[str]:
    try:
        value = nested_get(obj, *path)
    except (KeyError, TypeError):
        return []
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    return []


class ResourceCatalog:
    """API resources and CRDs of one cluster, with lookup helpers."""

    def __init__(
        self,
        api_resources: Iterable[APIResource] = (),
        crd_list: Iterable[Mapping[str, Any]] = (),
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.api_resources: list[APIResource] = list(api_resources)
        self.crd_list: list[Mapping[str, Any]] = list(crd_list)
        self.cache = cache if cache is not None else TTLCache()

    def refresh_crds(
        self, query: Callable[[], list[Mapping[str, Any]]], ttl: float | timedelta
    ) -> list[Mapping[str, Any]]:
        """Reload the CRD list through the cache; on failure the list becomes empty."""
        try:
            crds = list(get_or_set(self.cache, _CRD_CACHE_KEY, ttl, query))
        except Exception as exc:  # noqa: BLE001 - discovery failures leave the list empty
            logger.info("Error listing CRDs: %s", exc)
            crds = []
        self.crd_list = crds
        return crds

    def clear_cache(self) -> None:
        self.cache.clear()

    def gvr_by_gvk(self, gvk: GroupVersionKind) -> tuple[GroupVersionResource, bool]:
        """Resource coordinates and scope for an exact GVK, or empty and False."""
        for r in self.api_resources:
            if r.kind == gvk.kind and r.version == gvk.version and r.group == gvk.group:
                return GroupVersionResource(r.group, r.version, r.name), r.namespaced
        return GroupVersionResource(), False

    def gvr_by_kind(self, kind: str) -> tuple[GroupVersionResource, bool]:
        """Resource coordinates and scope of the first resource with ``kind``."""
        for r in self.api_resources:
            if r.kind == kind:
                return GroupVersionResource(r.group, r.version, r.name), r.namespaced
        return GroupVersionResource(), False

    def is_builtin_resource(self, kind: str) -> bool:
        return any(r.kind == kind for r in self.api_resources)

    def get_crd(self, kind: str, group: str) -> Mapping[str, Any]:
        """Return the CRD defining ``kind`` in ``group``; raise ``LookupError`` if none."""
        for crd in self.crd_list:
            crd_kind = _nested_str(crd, "spec", "names", "kind")
            crd_group = _nested_str(crd, "spec", "group")
            if crd_kind is None or crd_group is None:
                continue
            if crd_kind == kind and crd_group == group:
                return crd
        raise LookupError(f"crd {kind}.{group} not found")

    def parse_gvk_to_gvr(
        self, gvks: Sequence[GroupVersionKind], version: Optional[str] = None
    ) -> tuple[GroupVersionResource, bool]:
        """Resolve GVKs to resource coordinates and whether they are namespaced."""
        gvk = select_gvk(gvks, version)
        if self.is_builtin_resource(gvk.kind):
            return self.gvr_by_kind(gvk.kind)
        try:
            crd = self.get_crd(gvk.kind, gvk.group)
        except LookupError:
            return GroupVersionResource(), False
        namespaced = _nested_str(crd, "spec", "scope") == "Namespaced"
        return gvr_from_crd(crd), namespaced

    def find_gvk_by_table_name_in_api_resources(self, table_name: str) -> Optional[GroupVersionKind]:
        """Match a name, kind, singular or short name against the API resources."""
        for r in self.api_resources:
            if table_name in (r.name, r.kind, r.singular_name) or table_name in r.short_names:
                return GroupVersionKind(group=r.group, version=r.version, kind=r.kind)
        return None

    def find_gvk_by_table_name_in_crd_list(self, table_name: str) -> Optional[GroupVersionKind]:
        """Match a kind, plural, singular or short name against the CRD list."""
        for crd in self.crd_list:
            try:
                names = nested_get(crd, "spec", "names")
            except (KeyError, TypeError):
                continue
            if not isinstance(names, Mapping):
                continue
            kind = names.get("kind") if isinstance(names.get("kind"), str) else ""
            plural = names.get("plural") if isinstance(names.get("plural"), str) else ""
            singular = names.get("singular") if isinstance(names.get("singular"), str) else ""
            short_names = _nested_str_list(crd, "spec", "names", "shortNames")
            if table_name not in (kind, plural, singular) and table_name not in short_names:
                continue
            group = _nested_str(crd, "spec", "group") or ""
            try:
                versions = nested_get(crd, "spec", "versions")
            except (KeyError, TypeError):
                continue
            if not isinstance(versions, list) or not versions or not isinstance(versions[0], Mapping):
                continue
            name = versions[0].get("name")
            return GroupVersionKind(group=group, version=name if isinstance(name, str) else "", kind=kind)
        return None

    def list_available_table_names(self) -> list[str]:
        """Sorted unique lower-case kinds and short names, without option types."""
        names = set()
        for r in self.api_resources:
            names.add(r.kind.lower())
            names.update(r.short_names)
        return sorted(n for n in names if "Option" not in n)