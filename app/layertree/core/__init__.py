"""Configuration and path management for layertree."""
