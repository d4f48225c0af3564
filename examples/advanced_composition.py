#!/usr/bin/env python3
"""
Advanced composition example for shortcomposer.

This example demonstrates:
1. Inspecting the FFmpeg command for a cross-faded video short (dry run)
2. Rendering it with an outro
3. Burning styled captions into the result
4. Doing the same through a deployed composition service
"""

import asyncio
import os

from shortcomposer import (
    Anchor,
    CaptionStyle,
    ClipMode,
    ClipSource,
    Composer,
    ComposeMode,
    CompositionSettings,
    ShortComposition,
    ShortsClient,
    Transition,
    resolve_timeline,
)


def dry_run(videos, audio, settings):
    """Print the FFmpeg command without probing or rendering anything."""
    clips = [ClipSource.video(path, i, duration=6.0) for i, path in enumerate(videos)]
    timeline = resolve_timeline(clips, settings, audio_duration=15.0)
    composition = ShortComposition(clips, audio, timeline, settings)
    print("FFmpeg command:")
    print(composition.dry_run("preview"))


async def render(videos, audio, outro, captions, settings, style):
    composer = Composer()
    uploads = {"videos": videos, "audio": [audio], "outro": [outro]}
    short = await composer.compose(
        ComposeMode.VIDEOS_TO_VIDEO, uploads, settings.model_dump_json()
    )
    with open("short.mp4", "wb") as f:
        f.write(short.data)
    print(f"✅ Short rendered ({short.size} bytes)")

    captioned = await composer.compose(
        ComposeMode.BURN_CAPTIONS,
        {"video": ["short.mp4"], "captions": [captions]},
        style.model_dump_json(),
    )
    with open("short_captioned.mp4", "wb") as f:
        f.write(captioned.data)
    print(f"✅ Captions burned ({captioned.size} bytes)")


def main():
    """Run advanced composition example."""
    videos = ["clips/intro.mp4", "clips/street.mp4", "clips/skyline.mp4"]
    audio = "audio/narration.mp3"
    outro = "branding/outro.png"
    captions = "captions/narration.ass"

    settings = CompositionSettings(
        mode=ClipMode.SPEED,
        transition=Transition.DISSOLVE,
        transition_duration=0.6,
        vignette=True,
    )
    style = CaptionStyle(
        font="Montserrat",
        font_size=84,
        primary_color="#FFE400",
        outline=4,
        position=Anchor.CENTER,
    )

    dry_run(videos, audio, settings)

    missing = [p for p in [*videos, audio, outro, captions] if not os.path.exists(p)]
    if missing:
        print(f"Skipping render, missing inputs: {', '.join(missing)}")
        return

    asyncio.run(render(videos, audio, outro, captions, settings, style))

    # The same request against a running composition service
    base_url = os.getenv("SHORTCOMPOSER_BASE_URL")
    if base_url:
        client = ShortsClient(base_url=base_url)
        data = client.videos_to_video(videos, audio, outro=outro, settings=settings)
        with open("short_remote.mp4", "wb") as f:
            f.write(data)
        print("✅ Remote short rendered")


if __name__ == "__main__":
    main()
