"""Catalog of headshot style presets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StylePreset:
    id: str
    name: str
    description: str
    prompt: str
    swatch: str


HEADSHOT_STYLES: tuple[StylePreset, ...] = (
    StylePreset(
        id="corporate-grey",
        name="Corporate Grey",
        description="Professional studio look with a neutral grey backdrop.",
        prompt=(
            "professional corporate headshot, neutral grey studio background, high-end business attire,"
            " soft studio lighting, sharp focus, high resolution"
        ),
        swatch="#94a3b8",
    ),
    StylePreset(
        id="modern-tech",
        name="Modern Tech Office",
        description="Clean, bright office environment with soft bokeh.",
        prompt=(
            "professional tech professional headshot, modern bright office background with soft bokeh,"
            " smart casual attire, natural window lighting, clean aesthetic, high resolution"
        ),
        swatch="#dbeafe",
    ),
    StylePreset(
        id="outdoor-natural",
        name="Outdoor Natural",
        description="Warm, natural light with a blurred greenery background.",
        prompt=(
            "professional outdoor headshot, blurred park greenery background, warm natural sunlight,"
            " approachable smile, casual professional attire, high resolution"
        ),
        swatch="#d1fae5",
    ),
    StylePreset(
        id="executive-dark",
        name="Executive Dark",
        description="Sophisticated dark wood or library setting.",
        prompt=(
            "executive professional headshot, dark wood library background, dramatic professional lighting,"
            " formal business attire, authoritative yet approachable, high resolution"
        ),
        swatch="#292524",
    ),
)

_STYLES_BY_ID = {style.id: style for style in HEADSHOT_STYLES}


def get_style(style_id: str) -> StylePreset:
    try:
        return _STYLES_BY_ID[style_id]
    except KeyError:
        raise KeyError(f"Unknown headshot style: {style_id!r}") from None
