#!/usr/bin/env python3
"""
Basic usage example for shortcomposer.

This example demonstrates:
1. Composing a vertical short from a few images and a narration track
2. Following progress through the status callback
3. Writing the rendered MP4
"""

import asyncio
import os
import sys

from shortcomposer import Composer, ComposeMode, CompositionSettings, Effect


def main():
    """Run basic usage example."""
    if len(sys.argv) < 3:
        print("Usage: basic_usage.py NARRATION IMAGE [IMAGE ...]")
        return

    audio, images = sys.argv[1], sys.argv[2:]
    for path in [audio, *images]:
        if not os.path.exists(path):
            print(f"File not found: {path}")
            return

    # Slow zoom on every image, duration taken from the narration
    settings = CompositionSettings(effect=Effect.ZOOM_IN, vignette=True)

    def progress_callback(status):
        print(f"Status: {status}")

    composer = Composer()
    print(f"Composing {len(images)} image(s) over {audio}...")
    result = asyncio.run(
        composer.compose(
            ComposeMode.IMAGES_TO_VIDEO,
            {"images": images, "audio": [audio]},
            settings.model_dump_json(),
            on_status=progress_callback,
        )
    )

    output_path = "short.mp4"
    with open(output_path, "wb") as f:
        f.write(result.data)

    print("✅ Short composed!")
    print(f"Output saved to: {output_path} ({result.size} bytes)")


if __name__ == "__main__":
    main()
