"""Certificate renewal for GitLab deployments."""

from .acme import AcmeRenewalScript

__all__ = ["AcmeRenewalScript"]
