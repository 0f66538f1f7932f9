from .engine import (
    extract_image_id,
    filter_image_candidates,
    final_path_segment,
    is_direct_link,
    iter_image_candidates,
    looks_like_image_host,
)
from .models import Author, ImageCandidate, ListingEntry

__all__ = [
    "Author",
    "ImageCandidate",
    "ListingEntry",
    "extract_image_id",
    "filter_image_candidates",
    "final_path_segment",
    "is_direct_link",
    "iter_image_candidates",
    "looks_like_image_host",
]
