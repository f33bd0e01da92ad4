"""
Content phase: turns raw crawl records into clean content documents.
"""

from .cleaner import clean_news_body, clean_page_body, clean_scholarship_body
from .fields import merge_fields, parse_scholarship_fields
from .prepare import ContentPreparer

__all__ = [
    "ContentPreparer",
    "clean_news_body",
    "clean_page_body",
    "clean_scholarship_body",
    "parse_scholarship_fields",
    "merge_fields",
]
