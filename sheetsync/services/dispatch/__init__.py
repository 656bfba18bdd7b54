"""Mutation dispatch for text, component and image values."""

from .components import ComponentIndex, swap_component
from .images import HttpImageFetcher, ImageFetcher, convert_to_direct_url, is_image_url, sync_image
from .text import sync_text

__all__ = [
    "ComponentIndex",
    "HttpImageFetcher",
    "ImageFetcher",
    "convert_to_direct_url",
    "is_image_url",
    "swap_component",
    "sync_image",
    "sync_text",
]
