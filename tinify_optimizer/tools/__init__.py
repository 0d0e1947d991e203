"""
Tools module for the caller-facing surface.

This module contains the tool entry points that wrap the optimization service.
"""

from tinify_optimizer.tools.optimize_image_tool import optimize_image

__all__ = ["optimize_image"]
