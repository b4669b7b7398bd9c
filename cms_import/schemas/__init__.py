"""
Pydantic schemas for import input.
"""

from cms_import.schemas.story import (
    Card,
    ContentBlock,
    ImageBlock,
    SocialEmbedBlock,
    StoryRecord,
    StorySection,
    StorySeo,
    StoryTag,
    TextBlock,
    TitleBlock,
    UnsupportedBlock,
    VideoBlock,
    parse_block,
)

__all__ = [
    "Card",
    "ContentBlock",
    "ImageBlock",
    "SocialEmbedBlock",
    "StoryRecord",
    "StorySection",
    "StorySeo",
    "StoryTag",
    "TextBlock",
    "TitleBlock",
    "UnsupportedBlock",
    "VideoBlock",
    "parse_block",
]
