"""DynamoDB persistence for email records."""
