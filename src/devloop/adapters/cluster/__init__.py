"""Adapter backed by a Kubernetes-compatible cluster."""

from .adapter import ClusterAdapter
from .client import KubectlClient

__all__ = ["ClusterAdapter", "KubectlClient"]
