#!/usr/bin/env python3
"""
Basic usage examples for the label-vision library.

This file shows:
1. One-off text detection with capture advice
2. The quick low-resolution pre-check
3. Detection improved by stored annotations
4. Training statistics and export
"""

import sys
import asyncio
from pathlib import Path

# Configuration
IMAGE_PATH = "label.jpg"
TRAINING_DIR = "training_data"

# Add src to path for development
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))


def print_header(title):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def example_1_detect_text():
    """
    Example 1: Simplest detection
    - Uses the packaged default configuration
    - Regions are reported in native image pixels
    """
    print_header("EXAMPLE 1: Text Detection")

    from label_vision import detect_text

    result = await detect_text(IMAGE_PATH)

    print(f"\n  Has text: {result.has_text}")
    print(f"  Confidence: {result.confidence:.1%} ({result.confidence_level.value})")
    print(f"  Quality: {result.quality.overall:.3f}")
    print(f"  Regions: {result.region_count}")
    for region in result.text_regions:
        print(f"    ({region.x}, {region.y}) {region.width}x{region.height} "
              f"confidence {region.confidence:.2f}, ~{region.estimated_char_count} chars")

    print("\n  Advice:")
    for recommendation in result.top_recommendations():
        print(f"    - {recommendation}")


async def example_2_quick_check():
    """
    Example 2: Quick pre-check
    - Contrast and sharpness on a 200x200 thumbnail
    """
    print_header("EXAMPLE 2: Quick Check")

    from label_vision import quick_text_check

    check = await quick_text_check(IMAGE_PATH)
    print(f"\n  Worth analyzing: {check.has_text} (score {check.confidence:.2f})")


async def example_3_training_loop():
    """
    Example 3: Human-in-the-loop corrections
    - Analyze, draw a missed region, save, analyze again
    """
    print_header("EXAMPLE 3: Training Loop")

    from label_vision import (
        TextDetectionPipeline, TrainingStore, FileKeyValueStore,
        BoundingBox, DisplayGeometry, ImageDimensions,
    )
    from PIL import Image

    pipeline = TextDetectionPipeline(store=TrainingStore(FileKeyValueStore(TRAINING_DIR)))

    first = await pipeline.analyze(IMAGE_PATH)
    print(f"\n  Image hash: {first.image_hash}")
    print(f"  Detected regions: {len(first.annotations)}")

    with Image.open(IMAGE_PATH) as image:
        width, height = image.size

    # Image rendered at half size at the top-left of the screen
    display = DisplayGeometry(0, 0, width / 2, height / 2, width, height)

    session = pipeline.start_annotation(first)
    drawn = session.add_region(BoundingBox(20, 20, 120, 40), display)
    if drawn is not None:
        session.relabel(drawn.id, "Best before date")
    session.set_feedback(overall_quality=4, detection_accuracy=3, comments="date was missed")
    session.complete(ImageDimensions(width, height))

    second = await pipeline.analyze(IMAGE_PATH)
    print(f"  Improved: {second.improved}")
    print(f"  Confidence: {first.detection.confidence:.1%} -> {second.detection.confidence:.1%}")
    for correction in second.user_corrections:
        print(f"    correction '{correction.label}' at ({correction.x:.0f}, {correction.y:.0f})")


def example_4_statistics():
    """
    Example 4: Statistics and export
    """
    print_header("EXAMPLE 4: Training Statistics")

    from label_vision import TrainingStore, FileKeyValueStore, export_filename

    store = TrainingStore(FileKeyValueStore(TRAINING_DIR))
    stats = store.stats()

    print(f"\n  Images: {stats.total_images}")
    print(f"  Annotations: {stats.total_annotations}")
    print(f"  Average quality: {stats.average_quality:.1f}")
    print(f"  Average accuracy: {stats.average_accuracy:.1f}")
    print(f"  Active this week: {stats.recent_activity_count}")

    export_path = Path(TRAINING_DIR) / export_filename()
    export_path.write_text(store.export_all(), encoding="utf-8")
    print(f"  Exported to: {export_path}")


async def run_examples():
    await example_1_detect_text()
    await example_2_quick_check()
    await example_3_training_loop()
    example_4_statistics()


def main():
    """Run all basic usage examples"""
    print_header("LABEL VISION - BASIC USAGE EXAMPLES")
    print(f"\nImage: {IMAGE_PATH}")

    if not Path(IMAGE_PATH).exists():
        print(f"\nERROR: Image not found: {IMAGE_PATH}")
        print("Please update IMAGE_PATH at the top of this file")
        return

    from label_vision import configure_logging
    configure_logging("INFO")

    asyncio.run(run_examples())
    print_header("ALL BASIC EXAMPLES COMPLETED")


if __name__ == "__main__":
    main()
