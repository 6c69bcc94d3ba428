"""
dagateway: a gateway that publishes rollup data blobs to a data
availability network and serves them back by identifier.
"""

__version__ = "0.1.0"
