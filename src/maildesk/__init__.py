"""Draft and sent email lifecycle on a single DynamoDB table."""

__version__ = "0.1.0"
