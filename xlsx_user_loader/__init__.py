"""S3 → DynamoDB user loader for uploaded Excel workbooks."""

__version__ = "0.1.0"
