"""Source document model for AWS SDK service descriptions."""
