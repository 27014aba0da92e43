"""Operational scripts for Agora."""
