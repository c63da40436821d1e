"""Blob storage and upload ingestion services."""
