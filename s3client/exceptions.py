class S3ArgumentError(ValueError):
    """Raised for invalid caller input, always before any request is sent."""
