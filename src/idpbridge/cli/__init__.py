"""Command line interface for inspecting idpbridge configuration."""
