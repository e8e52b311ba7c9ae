"""Adapters connecting the domain to Graph, storage and HTTP infrastructure."""
