# security/__init__.py
from .signature import SignatureVerifier, compute_signature

__all__ = ["SignatureVerifier", "compute_signature"]
