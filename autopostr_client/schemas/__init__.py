"""Schemas — Pydantic request/response models for the local bridge API."""
