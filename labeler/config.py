"""Labeler configuration constants: single source of truth for all env vars."""

import os

# Dataset collector: where (image, annotation) pairs are POSTed
COLLECTOR_URL = os.getenv("COLLECTOR_URL", "http://localhost:3000/download")

# Device / file name the collector files uploads under
LABELER_DEVICE = os.getenv("LABELER_DEVICE", "")

# Figma REST API: Personal Access Token for design file access
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN", "")

# Collector service: storage root and server binding
DATASET_DIR = os.getenv("DATASET_DIR", "dataset")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3000"))

# CORS for the collector (comma-separated)
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "https://www.figma.com,null").split(",")
    if o.strip()
]
