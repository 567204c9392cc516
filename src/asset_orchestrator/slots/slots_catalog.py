"""Default asset catalog: chapter illustrations and the cinematic video."""

from __future__ import annotations

from ..domain.models import AssetKind, AssetRequest

ILLUSTRATION_CONFIG = {"aspect_ratio": "1:1", "image_size": "1K"}
CINEMATIC_VIDEO_CONFIG = {
    "number_of_videos": 1,
    "resolution": "1080p",
    "aspect_ratio": "16:9",
}

_ILLUSTRATION_BRIEFS: tuple[tuple[str, str, str], ...] = (
    (
        "Chapter 1",
        "A cartoon-realistic, colorful illustration of Mira, a young girl, following a "
        "trail of tiny blue sparks across a red Martian plain towards a gentle robot with "
        "a humming silver helmet standing on a ridge. Warm Martian palette (oranges, "
        "rusts) with electric blue sparks. High contrast.",
        "Mira finds a humming helmet on the red plain.",
    ),
    (
        "Chapter 2",
        "A close-up cartoon-realistic illustration of Tesla's silver helmet with tiny "
        "visible gears and a warm, friendly glowing visor. A small inset shows a tiny "
        "glowing green seed sprouting in red soil. Metallic silvers and warm visor glow. "
        "High contrast.",
        "The helmet's visor blinks like a friendly eye.",
    ),
    (
        "Chapter 3",
        "A cartoon-realistic illustration of Pip, a small wobbling drone, floating above "
        "cracked Martian ground while Mira and Tesla rewire an old, forgotten Tesla coil. "
        "Teamwork theme, bright copper wires, electric blue accents. High contrast.",
        "A small drone and two friends fix an old coil.",
    ),
    (
        "Chapter 4",
        "A cartoon-realistic interior view of the Tesla Tower: glowing blue blueprints and "
        "sky maps on dark walls, with a balcony view overlooking a glass city on Mars. "
        "Blueprints glow like stars. High contrast, cinematic lighting.",
        "Inside the tower, blueprints glow like stars.",
    ),
    (
        "Chapter 5",
        "A joyful cartoon-realistic illustration of Mira learning to ride wind gusts with "
        "Lio, a flying humanoid. Bright jetpack trails and motion lines in a Martian sky. "
        "Energetic, colorful, high contrast.",
        "Mira learns to fly with a friendly humanoid.",
    ),
    (
        "Chapter 6",
        "A dramatic cartoon-realistic illustration of the experiment: electric blue arcs "
        "leaping from a trident to a tall tower, lighting up a skyway path. A crowd "
        "watches from glass domes. Shimmering light, high contrast.",
        "Electricity forms a glowing path to the sky.",
    ),
    (
        "Chapter 7",
        "A cartoon-realistic storm scene on Mars: a net of electric blue light shielding a "
        "glass city from dark, dramatic storm clouds. Mira and Tesla working together at "
        "the tower. Courageous theme, high contrast.",
        "A net of light shields the city from a storm.",
    ),
    (
        "Chapter 8",
        "A warm cartoon-realistic farewell scene: Martian ships rising along a path of "
        "light into a beautiful Martian sunset. Mira holding a glowing seed, exchanging "
        "gifts with visitors. Warm oranges and rusts, peaceful atmosphere.",
        "Visitors depart, leaving gifts and promises.",
    ),
)

CINEMATIC_VIDEO_PROMPT = (
    "A cinematic high-definition wide shot of a glowing Tesla Tower on the red plains of "
    "Mars. Electric blue arcs of energy leap from the tower into a dark starry sky, "
    "forming a shimmering ladder of light. In the foreground, a young girl named Mira "
    "and a gentle robot with a silver humming helmet watch in awe. The atmosphere is "
    "optimistic, vibrant, and magical."
)


def illustration_requests() -> list[AssetRequest]:
    """Return the gallery requests in chapter order (ids ``ch1``..``ch8``)."""

    return [
        AssetRequest(
            id=f"ch{index}",
            kind=AssetKind.IMAGE,
            prompt=prompt,
            config=ILLUSTRATION_CONFIG,
            title=chapter,
            caption=caption,
        )
        for index, (chapter, prompt, caption) in enumerate(_ILLUSTRATION_BRIEFS, start=1)
    ]


def cinematic_video_request() -> AssetRequest:
    return AssetRequest(
        id="cinematic",
        kind=AssetKind.VIDEO,
        prompt=CINEMATIC_VIDEO_PROMPT,
        config=CINEMATIC_VIDEO_CONFIG,
        title="Cinematic vision",
        caption="The Tesla Tower lights the Martian sky.",
    )


def default_catalog() -> list[AssetRequest]:
    """Video first, then the illustrations, matching page order."""

    return [cinematic_video_request(), *illustration_requests()]


__all__ = [
    "cinematic_video_request",
    "default_catalog",
    "illustration_requests",
]
