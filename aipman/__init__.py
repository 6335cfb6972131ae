"""aip-man: AppImage package manager."""

__author__ = "aip-man contributors"
__license__ = "MIT"
__version__ = "1.0.0"
