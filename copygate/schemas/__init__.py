"""Pydantic request/response models for the copygate API."""
