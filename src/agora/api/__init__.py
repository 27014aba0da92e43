"""API package for Agora."""
