"""Raw binary backup images."""

from i1d3tool.storage.backup import ensure_writable, load_image, save_image

__all__ = ["ensure_writable", "load_image", "save_image"]
