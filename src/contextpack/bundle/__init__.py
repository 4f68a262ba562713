"""Budgeted, tiered-fidelity bundle assembly."""

from contextpack.bundle.assembler import BundleAssembler, build_bundle
from contextpack.bundle.signature import extract_signature

__all__ = ["BundleAssembler", "build_bundle", "extract_signature"]
