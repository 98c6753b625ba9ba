"""LeadHub: inbound lead webhooks and the management console API."""

__version__ = "0.1.0"
