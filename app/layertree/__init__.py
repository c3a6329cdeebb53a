"""layertree - inspect container image layers as merged file trees."""

__version__ = "0.1.0"
