"""Shared test fixtures for the compose draft service."""
