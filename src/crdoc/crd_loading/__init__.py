"""CRD loading exports."""

from .crd_models import CRDVersion, CustomResourceDefinition
from .manifest_reader import (
    CRDDecodeError,
    DecodeError,
    decode_crd,
    load_crds,
    read_manifest_file,
)

__all__ = [
    "CRDVersion",
    "CustomResourceDefinition",
    "DecodeError",
    "CRDDecodeError",
    "decode_crd",
    "load_crds",
    "read_manifest_file",
]
