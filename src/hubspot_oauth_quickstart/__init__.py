"""
HubSpot OAuth 2.0 quickstart: authorization code flow, per-session token
caching with silent refresh, and a QA/PROD environment toggle.
"""

__version__ = "0.1.0"
