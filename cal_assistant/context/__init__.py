"""Request context module."""

from .models import ProviderCredentials, RequestContext

__all__ = ["ProviderCredentials", "RequestContext"]
