"""Discovery, normalization and projection services."""
