"""Maintenance tools for Kafka clusters that drive the Kafka admin scripts."""

__version__ = "1.3.0"
