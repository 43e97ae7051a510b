"""Client for the NS1 REST API (account, data, DNSSEC and IPAM services) and a local mock server for tests."""

__version__ = "2.4.4"