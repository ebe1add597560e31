"""Version information for the Plaza Python SDK"""

__version__ = "0.1.0"
