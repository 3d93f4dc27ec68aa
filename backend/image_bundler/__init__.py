"""
Image Bundler Module

Packages a user-selected set of image URLs into one ZIP archive.

Features:
- Sequential download with per-item timeout
- Item count and total size budgets
- Position-based entry naming (image-<n>.<ext>)
"""

from .routes_fastapi import router
from .bundler import BundleConfig, BundleError, ImageBundler

__all__ = ["router", "BundleConfig", "BundleError", "ImageBundler"]
