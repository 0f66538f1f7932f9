from .feed_url import Feed, build_listing_url, split_page_type
from .fetcher import MetadataFetcher
from .listing_parser import ParseError, parse_listing, parse_listing_entries

__all__ = [
    "Feed",
    "MetadataFetcher",
    "ParseError",
    "build_listing_url",
    "parse_listing",
    "parse_listing_entries",
    "split_page_type",
]
