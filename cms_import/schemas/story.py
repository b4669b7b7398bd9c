"""
Input schemas for CMS story exports.

One line of the export is one story object. Keys are hyphenated the way the
CMS emits them; fields below use snake_case with aliases.

Body content lives in `cards[*].story-elements`. Each element is parsed into
one variant of a closed set of block types. Anything the importer does not
render becomes an UnsupportedBlock so the transformer's drop policy stays
exhaustive.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cms_import.constants import ContentDefaults

SOCIAL_EMBED_SUBTYPES = frozenset({"tweet", "instagram", "dailymotion-embed-script"})


class _InputModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


# -----------------------------------------------------------------------------
# Content blocks
# -----------------------------------------------------------------------------

class TextBlock(_InputModel):
    """Paragraph text. Already HTML in the export."""

    kind: Literal["text"] = "text"
    text: str | None = None


class ImageBlock(_InputModel):
    kind: Literal["image"] = "image"
    image_s3_key: str | None = Field(None, alias="image-s3-key")
    alt_text: str | None = Field(None, alias="alt-text")
    title: str | None = None
    description: str | None = None  # caption


class VideoBlock(_InputModel):
    kind: Literal["video"] = "video"
    url: str | None = None


class SocialEmbedBlock(_InputModel):
    """Third-party embed (tweet, instagram post, dailymotion player)."""

    kind: Literal["social"] = "social"
    subtype: str


class TitleBlock(_InputModel):
    kind: Literal["title"] = "title"
    text: str | None = None


class UnsupportedBlock(_InputModel):
    """Anything the importer drops: composites, files, related-reading links."""

    kind: Literal["unsupported"] = "unsupported"
    type: str | None = None
    subtype: str | None = None


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, VideoBlock, SocialEmbedBlock, TitleBlock, UnsupportedBlock],
    Field(discriminator="kind"),
]

_BLOCK_TYPES: dict[str, type[_InputModel]] = {
    "text": TextBlock,
    "image": ImageBlock,
    "youtube-video": VideoBlock,
    "title": TitleBlock,
}


def parse_block(raw: Any) -> _InputModel:
    """Map one raw story element onto its block variant."""
    if isinstance(raw, _InputModel):
        return raw
    if not isinstance(raw, dict):
        return UnsupportedBlock()

    block_type = raw.get("type")
    subtype = raw.get("subtype")

    if subtype == ContentDefaults.RELATED_READING_SUBTYPE:
        return UnsupportedBlock(type=block_type, subtype=subtype)

    if block_type == "jsembed":
        if subtype in SOCIAL_EMBED_SUBTYPES:
            return SocialEmbedBlock(subtype=subtype)
        return UnsupportedBlock(type=block_type, subtype=subtype)

    model = _BLOCK_TYPES.get(block_type)
    if model is None:
        return UnsupportedBlock(type=block_type, subtype=subtype)

    fields = {k: v for k, v in raw.items() if k not in ("type", "subtype", "kind")}
    return model.model_validate(fields)


# -----------------------------------------------------------------------------
# Story
# -----------------------------------------------------------------------------

class Card(_InputModel):
    story_elements: tuple[ContentBlock, ...] = Field(default=(), alias="story-elements")

    @field_validator("story_elements", mode="before")
    @classmethod
    def parse_elements(cls, v: Any) -> Any:
        if v is None:
            return ()
        if not isinstance(v, list):
            return v
        return tuple(parse_block(el) for el in v)


class StorySection(_InputModel):
    id: int | str | None = None
    slug: str = ""
    name: str = ""


class StoryTag(_InputModel):
    id: int | str
    name: str = ""


class StorySeo(_InputModel):
    meta_title: str | None = Field(None, alias="meta-title")
    meta_description: str | None = Field(None, alias="meta-description")


class StoryRecord(_InputModel):
    """One exported story. Never mutated after decoding."""

    id: str
    headline: str
    subheadline: str | None = None
    slug: str
    status: str | None = None
    story_template: str | None = Field(None, alias="story-template")
    summary: str | None = None
    seo: StorySeo | None = None
    hero_image_s3_key: str | None = Field(None, alias="hero-image-s3-key")
    hero_image_alt_text: str | None = Field(None, alias="hero-image-alt-text")
    sections: tuple[StorySection, ...] = ()
    tags: tuple[StoryTag, ...] = ()
    cards: tuple[Card, ...] = ()

    # Unix milliseconds
    created_at: int | None = Field(None, alias="created-at")
    updated_at: int | None = Field(None, alias="updated-at")
    published_at: int | None = Field(None, alias="published-at")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Some exports carry numeric ids
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("sections", "tags", "cards", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @property
    def body_blocks(self) -> list:
        """All story elements across cards, in order."""
        return [block for card in self.cards for block in card.story_elements]

    @property
    def primary_section(self) -> StorySection | None:
        return self.sections[0] if self.sections else None
