"""
Content transformer: story body blocks -> one HTML payload.

Policy:
- text: appended verbatim (the export already carries HTML), skipped when blank
- image: <figure> with resolved URL, alt text (alt-text -> title -> "") and optional caption
- video: YouTube embed when an id can be extracted, dropped otherwise
- social: placeholder container the front end hydrates (tweet, instagram, dailymotion)
- title: <h2> heading, skipped when blank
- everything else, including related-reading links: dropped

Pure functions, no I/O. An empty result becomes a single empty paragraph so
storage always receives valid content.
"""

import html
import re
from collections.abc import Iterable

from cms_import.constants import ContentDefaults
from cms_import.schemas.story import (
    ImageBlock,
    SocialEmbedBlock,
    TextBlock,
    TitleBlock,
    UnsupportedBlock,
    VideoBlock,
)

YOUTUBE_ID_PATTERN = re.compile(r"(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([^&\s?/#]+)")

SOCIAL_EMBED_HTML = {
    "tweet": '<div class="social-embed tweet-embed" data-embed-type="twitter"></div>',
    "instagram": '<div class="social-embed instagram-embed" data-embed-type="instagram"></div>',
    "dailymotion-embed-script": (
        '<div class="video-embed dailymotion-embed" data-embed-type="dailymotion"></div>'
    ),
}


def image_url(s3_key: str | None, base_url: str) -> str | None:
    """Join an image storage key onto the CDN base URL."""
    if not s3_key:
        return None
    return f"{base_url}{s3_key}"


def extract_youtube_id(url: str | None) -> str | None:
    if not url:
        return None
    match = YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def _render_image(block: ImageBlock, base_url: str) -> str | None:
    src = image_url(block.image_s3_key, base_url)
    if not src:
        return None
    alt = html.escape(block.alt_text or block.title or "", quote=True)
    caption = f"<figcaption>{block.description}</figcaption>" if block.description else ""
    return f'<figure class="article-image"><img src="{src}" alt="{alt}" loading="lazy" />{caption}</figure>'


def _render_video(block: VideoBlock) -> str | None:
    video_id = extract_youtube_id(block.url)
    if not video_id:
        return None
    src = ContentDefaults.YOUTUBE_EMBED_URL.format(video_id=video_id)
    return (
        '<div class="video-embed youtube-embed">'
        f'<iframe src="{src}" frameborder="0" allowfullscreen loading="lazy"></iframe>'
        "</div>"
    )


def render_block(block, base_url: str) -> str | None:
    """Render one block, or None when the block is dropped."""
    if isinstance(block, TextBlock):
        return block.text if block.text and block.text.strip() else None
    if isinstance(block, ImageBlock):
        return _render_image(block, base_url)
    if isinstance(block, VideoBlock):
        return _render_video(block)
    if isinstance(block, SocialEmbedBlock):
        return SOCIAL_EMBED_HTML.get(block.subtype)
    if isinstance(block, TitleBlock):
        return f"<h2>{block.text}</h2>" if block.text and block.text.strip() else None
    if isinstance(block, UnsupportedBlock):
        return None
    raise TypeError(f"Unknown content block: {type(block).__name__}")


def render_blocks(blocks: Iterable, base_url: str) -> str:
    """Render ordered body blocks into a single HTML payload."""
    parts = []
    for block in blocks:
        rendered = render_block(block, base_url)
        if rendered:
            parts.append(rendered)
    return "".join(parts) or ContentDefaults.EMPTY_PAYLOAD
