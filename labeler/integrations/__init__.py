"""HTTP integrations: Figma REST API (image export, node trees) and dataset upload."""
