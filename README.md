# komcp

Helpers for working with Kubernetes resources held as plain Python data, and
the definitions of a set of Model Context Protocol (MCP) tools for managing
clusters: generic resources, deployments, nodes, storage classes, ingress
classes, events, clusters and YAML documents.

The package has three parts:

- `komcp.utils`: self-contained helpers.
  - `quantity`: `parse_quantity`, `Quantity`, `QuantityFormat`, `format_resource`
  - `cache`: `TTLCache` and `get_or_set`
  - `labels`: `LabelsManager`, `NodeSelectorRequirement`, `map_contains`,
    `match_node_selector_requirement`
  - `hashing`: `fnv1_32`, `fnv1a_32`
  - `nettools`: `cidr_total_ips`
  - `textutil`: integer parsing, newline and quote handling, `parse_time`,
    `detect_type` with `ValueType`, and more
  - `jsonutil`: `to_json`, `deep_copy`
  - `unstructured`: `nested_get`, `sort_by_creation_time`,
    `remove_managed_fields`, `to_yaml`, `add_or_update_annotations`
  - `randomutil`: `rand_n_digit_int`, `rand_n_length_string`
  - `wait`: `wait_until`
- `komcp.kom`: `catalog.ResourceCatalog`, which maps kinds, table names and
  CRDs to group/version/resource triples, and `usage`, the resource-usage
  table model (`ResourceUsageResult`, `to_table_data`).
- `komcp.mcp`: tool specifications, argument parsing and result building,
  collected in a `ToolRegistry`.

## Formatting resource quantities

```python
from komcp.utils.quantity import parse_quantity, format_resource

print(format_resource(parse_quantity("8127096Ki")))  # 7.75Gi
print(format_resource(parse_quantity("256Gi")))      # 256.00Gi
print(format_resource(parse_quantity("2k")))         # 2.00K
```

Binary quantities (`Ki`, `Mi`, `Gi`, …) are shown in Ki/Mi/Gi/Ti, decimal
quantities in K/M/G/T, both with two decimals; values below one unit are
shown as plain integers. Quantities written with an exponent (`1.5e3`) keep
their canonical notation.

## Caching expensive lookups

```python
from komcp.utils.cache import TTLCache, get_or_set

cache = TTLCache()
crds = get_or_set(cache, "crdList", 60, lambda: ["example.com/Widget"])
```

A TTL of zero or less skips the cache and calls the query every time; a
failing query raises and nothing is stored. TTLs may be given in seconds or as
a `datetime.timedelta`.

## Looking up resource types

```python
from komcp.kom.catalog import APIResource, APIResourceList, ResourceCatalog, build_api_resources

resources = build_api_resources([
    APIResourceList("apps/v1", [APIResource("deployments", "deployment", True, "Deployment", ["deploy"])]),
])
catalog = ResourceCatalog(resources)
print(catalog.find_gvk_by_table_name_in_api_resources("deploy"))
print(catalog.gvr_by_kind("Deployment"))
```

CRD objects (plain dictionaries) can be passed as `crd_list`, or reloaded
through the cache with `refresh_crds(query, ttl)`.

## Resolving resource metadata from tool arguments

```python
from komcp.mcp.metadata import parse_from_arguments, is_namespaced

meta = parse_from_arguments({"kind": "deployment", "namespace": "default", "name": "web"})
print(meta.group, meta.version)  # apps v1
print(is_namespaced("node"))     # False
```

Well-known kinds such as `pod`, `deployment` or `storageclass` fill in their
API group and version; explicit non-empty `group`, `version` and `kind`
arguments take precedence.

## Collecting MCP tools

```python
from komcp.mcp.toolkit import ToolRegistry
from komcp.mcp import basic_tools, dynamic_tools, deployment_tools, node_tools

registry = ToolRegistry()
for module in (dynamic_tools, basic_tools, deployment_tools, node_tools):
    module.register_tools(registry)

print(registry.names())
spec = registry.get("get_k8s_resource")
```

Each `ToolSpec` has a name, a description, its `ToolParam`s and a handler
called as `handler(client, arguments)`. The `client` is any object you supply
that performs the cluster operations; the docstring of each tools module lists
the methods its handlers call, for example `client.scale_deployment(meta,
replicas)` or `client.journal_logs(meta, service, lines)`.

Results are built with `text_result` and `error_result` from
`komcp.mcp.toolkit` and are `CallToolResult` values holding `TextContent`
items: bytes become their text, a non-empty list of strings becomes one
content item per string, and anything else (strings included) is rendered as
compact JSON.

## What this package does not do

It contains no Kubernetes API client and no MCP server or transport. It does
not connect to clusters, listen on a port, or run as a command; a caller must
provide the client object that the tool handlers use and must serve the
registered tools itself.

## Running the tests

Install the package with its `test` extra and run `pytest` from the project
directory.