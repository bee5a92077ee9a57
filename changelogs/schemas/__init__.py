"""Pydantic schemas shared by the capture pipeline, stores and services."""
