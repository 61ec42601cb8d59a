"""
Shared utilities for the topology service.

- logging_config: Root logger setup and reload-time reconfiguration
"""
