import argparse
import json
import logging
from typing import Optional

from attrs import asdict

from ase_tools import AsepriteImage
from ase_tools.exceptions import AsepriteError
from ase_tools.version import __version__

try:
    from IPython.lib.pretty import pprint
except ImportError:
    from pprint import pprint

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="ase-tools command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input_file", help="Input Aseprite file")
    common.add_argument(
        "--lenient",
        action="store_true",
        help="Warn instead of failing on chunks with unread payload bytes",
    )
    common.add_argument(
        "--legacy-parent-scan",
        action="store_true",
        help="Never treat the first layer as a parent",
    )
    common.add_argument(
        "--normal-opacity",
        action="store_true",
        help="Apply layer and cel opacity to Normal layers",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export", parents=[common], help="Export a frame as PNG"
    )
    export_parser.add_argument("output_file", help="Output image file")
    export_parser.add_argument(
        "-f", "--frame", type=int, default=0, help="Frame index (default: 0)"
    )

    atlas_parser = subparsers.add_parser(
        "atlas", parents=[common], help="Pack every frame into one image"
    )
    atlas_parser.add_argument("output_file", help="Output image file")
    atlas_parser.add_argument(
        "-c", "--columns", type=int, default=None, help="Frames per row"
    )
    atlas_parser.add_argument("--rects", help="Write placement rectangles as JSON")
    atlas_parser.add_argument(
        "-j", "--workers", type=int, default=None, help="Worker threads"
    )

    subparsers.add_parser("tags", parents=[common], help="List animation tags")
    subparsers.add_parser("show", parents=[common], help="Show the file content")
    subparsers.add_parser(
        "debug", parents=[common], help="Show debug info for Aseprite file"
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    if args.verbose:
        logging.getLogger("ase_tools").setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    options = {"normal_opacity": args.normal_opacity}
    try:
        sprite = AsepriteImage.open(
            args.input_file,
            strict=not args.lenient,
            scan_first=not args.legacy_parent_scan,
        )

        if args.command == "export":
            sprite.composite(args.frame, **options).save(args.output_file)

        elif args.command == "atlas":
            atlas = sprite.atlas(
                columns=args.columns, workers=args.workers, **options
            )
            for index, error in sorted(atlas.failures.items()):
                logger.error("Frame %d was not composited: %s" % (index, error))
            image = atlas.topil()
            if image is None:
                logger.error("%s has no frames" % args.input_file)
                return 1
            image.save(args.output_file)
            if args.rects:
                with open(args.rects, "w") as f:
                    json.dump([asdict(rect) for rect in atlas.rects], f, indent=2)

        elif args.command == "tags":
            for tag in sprite.animations():
                print(
                    "%s\t%d\t%d\t%s"
                    % (
                        tag.name,
                        tag.from_frame,
                        tag.to_frame,
                        getattr(tag.direction, "name", tag.direction),
                    )
                )

        elif args.command == "show":
            pprint(sprite)

        elif args.command == "debug":
            pprint(sprite._record.header)
            for frame in sprite._record.frames:
                pprint(frame)

    except AsepriteError as e:
        logger.error("%s: %s" % (args.input_file, e))
        return 1

    return None


if __name__ == "__main__":
    main()
