"""API router subpackage for the static map registry.

Submodules:
    - smaps: Endpoints for uploading and listing static maps.
"""
