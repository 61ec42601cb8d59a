"""HTTP routers for the topology service."""
