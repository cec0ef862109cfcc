"""sigcheck: classify files in a directory tree as signed or unsigned."""

__app_name__ = "sigcheck"
__version__ = "1.0.0"
