"""HTTP adapters - Remote verification service client."""

from .verification_client import HttpVerificationClient

__all__ = ["HttpVerificationClient"]
