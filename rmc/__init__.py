"""
reddit-media-collector: download direct image links from subreddit listings.
"""

__version__ = "0.1.0"
