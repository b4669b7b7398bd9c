"""
Unit tests for the content transformer.

Covers the per-block render/drop policy and the empty-payload fallback.
"""

import pytest

from cms_import.schemas.story import (
    ImageBlock,
    SocialEmbedBlock,
    TextBlock,
    TitleBlock,
    UnsupportedBlock,
    VideoBlock,
    parse_block,
)
from cms_import.services.content_transformer import (
    extract_youtube_id,
    image_url,
    render_block,
    render_blocks,
)

BASE = "https://images.example.com/"


class TestTextAndTitle:
    def test_text_is_verbatim(self):
        block = TextBlock(text="<p>Hello <b>world</b></p>")

        assert render_block(block, BASE) == "<p>Hello <b>world</b></p>"

    def test_blank_text_dropped(self):
        assert render_block(TextBlock(text="   "), BASE) is None
        assert render_block(TextBlock(text=None), BASE) is None

    def test_title_becomes_h2(self):
        assert render_block(TitleBlock(text="Section"), BASE) == "<h2>Section</h2>"

    def test_blank_title_dropped(self):
        assert render_block(TitleBlock(text=""), BASE) is None


class TestImage:
    def test_image_with_alt_and_caption(self):
        block = ImageBlock(image_s3_key="a/b.jpg", alt_text="Alt", description="Caption")

        html = render_block(block, BASE)

        assert html == (
            '<figure class="article-image">'
            '<img src="https://images.example.com/a/b.jpg" alt="Alt" loading="lazy" />'
            "<figcaption>Caption</figcaption></figure>"
        )

    def test_alt_falls_back_to_title(self):
        block = ImageBlock(image_s3_key="a.jpg", title="Title text")

        assert 'alt="Title text"' in render_block(block, BASE)

    def test_alt_empty_when_nothing_given(self):
        html = render_block(ImageBlock(image_s3_key="a.jpg"), BASE)

        assert 'alt=""' in html
        assert "figcaption" not in html

    def test_alt_is_escaped(self):
        block = ImageBlock(image_s3_key="a.jpg", alt_text='He said "hi" <now>')

        html = render_block(block, BASE)

        assert 'alt="He said &quot;hi&quot; &lt;now&gt;"' in html

    def test_image_without_key_dropped(self):
        assert render_block(ImageBlock(alt_text="orphan"), BASE) is None


class TestVideo:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_youtube_id_extraction(self, url):
        assert extract_youtube_id(url) == "dQw4w9WgXcQ"

    def test_video_renders_embed(self):
        html = render_block(VideoBlock(url="https://youtu.be/abc123"), BASE)

        assert 'src="https://www.youtube.com/embed/abc123"' in html
        assert html.startswith('<div class="video-embed youtube-embed">')

    def test_unrecognized_video_dropped(self):
        assert render_block(VideoBlock(url="https://vimeo.com/1234"), BASE) is None
        assert render_block(VideoBlock(url=None), BASE) is None


class TestEmbedsAndUnsupported:
    def test_tweet_placeholder(self):
        html = render_block(SocialEmbedBlock(subtype="tweet"), BASE)

        assert 'data-embed-type="twitter"' in html

    def test_dailymotion_placeholder(self):
        html = render_block(SocialEmbedBlock(subtype="dailymotion-embed-script"), BASE)

        assert "dailymotion-embed" in html

    def test_unsupported_dropped(self):
        assert render_block(UnsupportedBlock(type="composite"), BASE) is None

    def test_unknown_object_raises(self):
        with pytest.raises(TypeError):
            render_block(object(), BASE)


class TestParseBlock:
    def test_known_types(self):
        assert isinstance(parse_block({"type": "text", "text": "x"}), TextBlock)
        assert isinstance(parse_block({"type": "image", "image-s3-key": "k"}), ImageBlock)
        assert isinstance(parse_block({"type": "youtube-video", "url": "u"}), VideoBlock)
        assert isinstance(parse_block({"type": "title", "text": "t"}), TitleBlock)

    def test_image_aliases(self):
        block = parse_block({"type": "image", "image-s3-key": "k.jpg", "alt-text": "A"})

        assert block.image_s3_key == "k.jpg"
        assert block.alt_text == "A"

    def test_related_reading_is_unsupported(self):
        block = parse_block({"type": "text", "subtype": "also-read", "text": "<a>read more</a>"})

        assert isinstance(block, UnsupportedBlock)

    def test_jsembed_subtypes(self):
        assert isinstance(parse_block({"type": "jsembed", "subtype": "tweet"}), SocialEmbedBlock)
        assert isinstance(parse_block({"type": "jsembed", "subtype": "tiktok"}), UnsupportedBlock)

    def test_unknown_type(self):
        block = parse_block({"type": "file", "subtype": "attachment"})

        assert isinstance(block, UnsupportedBlock)
        assert block.type == "file"


class TestRenderBlocks:
    def test_order_preserved(self):
        blocks = [
            TextBlock(text="<p>one</p>"),
            TitleBlock(text="two"),
            UnsupportedBlock(type="composite"),
            TextBlock(text="<p>three</p>"),
        ]

        assert render_blocks(blocks, BASE) == "<p>one</p><h2>two</h2><p>three</p>"

    def test_empty_result_is_empty_paragraph(self):
        assert render_blocks([], BASE) == "<p></p>"
        assert render_blocks([UnsupportedBlock(), TextBlock(text=" ")], BASE) == "<p></p>"

    def test_image_url_helper(self):
        assert image_url("x/y.png", BASE) == "https://images.example.com/x/y.png"
        assert image_url(None, BASE) is None
        assert image_url("", BASE) is None
