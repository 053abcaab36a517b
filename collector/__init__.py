"""Dataset collector service: receives (image, annotation) pairs from the labeler."""
