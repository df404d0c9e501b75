"""Package descriptor loading (hand-written YAML and generated forms)."""

from .loader import DescriptorLoader, PackageDescriptor, descriptor_in_dir  # noqa: F401

__all__ = ["DescriptorLoader", "PackageDescriptor", "descriptor_in_dir"]
