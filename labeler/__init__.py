"""UI-component dataset labeler.

Subpackages:
- core: Node model, classification policy, classifier (pure)
- integrations: Figma REST client and dataset uploader (httpx)

Modules:
- pipeline: Labeling session (classify top-level frames, upload in sequence)
- overlay: Review overlay planning
- palette: Synthetic palette planning for already-labeled components
"""
