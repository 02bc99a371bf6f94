"""Kubernetes resource helpers and MCP tool definitions for cluster management."""

__version__ = "0.1.0"