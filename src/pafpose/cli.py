"""CLI for pafpose: ``pafpose decode`` and ``pafpose topology``."""

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pafpose",
        description="Decode OpenPose heatmaps and part affinity fields into poses",
    )
    sub = parser.add_subparsers(dest="command")

    # pafpose decode
    dec_p = sub.add_parser("decode", help="Decode network outputs stored in an .npz file")
    dec_p.add_argument("input", help="Path to .npz with heatmaps and pafs arrays")
    dec_p.add_argument(
        "--heatmaps-key",
        default="heatmaps",
        help="Array name of the (K+1, H, W) heatmaps (default: heatmaps)",
    )
    dec_p.add_argument(
        "--pafs-key",
        default="pafs",
        help="Array name of the (2L, H, W) PAFs (default: pafs)",
    )
    dec_p.add_argument(
        "--config", "-c",
        default=None,
        help="JSON file with DecoderConfig fields",
    )
    dec_p.add_argument("--confidence-threshold", type=float, default=None)
    dec_p.add_argument("--min-peaks-distance", type=float, default=None)
    dec_p.add_argument("--min-joints-number", type=int, default=None)
    dec_p.add_argument("--min-subset-score", type=float, default=None)
    dec_p.add_argument(
        "--upsample",
        action="store_true",
        help="Upsample feature maps by upsample_ratio before decoding",
    )
    dec_p.add_argument(
        "--rescale",
        action="store_true",
        help="Map keypoints to input-image pixels using stride and upsample_ratio",
    )
    dec_p.add_argument("--scale-x", type=float, default=1.0, help="Image / model input width")
    dec_p.add_argument("--scale-y", type=float, default=1.0, help="Image / model input height")
    dec_p.add_argument(
        "-o", "--output",
        default=None,
        help="Write JSON here instead of stdout",
    )
    dec_p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # pafpose topology
    sub.add_parser("topology", help="Print the COCO-18 limb table")

    return parser


def _load_arrays(path: str, heatmaps_key: str, pafs_key: str):
    """Load heatmaps and PAFs from an .npz file."""
    from pafpose.errors import MissingArrayError

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    with np.load(path) as data:
        missing = [k for k in (heatmaps_key, pafs_key) if k not in data.files]
        if missing:
            raise MissingArrayError(path, missing, data.files)
        return data[heatmaps_key], data[pafs_key]


def _cmd_decode(args: argparse.Namespace) -> None:
    """Handle ``pafpose decode``."""
    from pafpose.config import DecoderConfig
    from pafpose.decoder import OpenPoseDecoder
    from pafpose.scaling import rescale_poses, upsample_feature_maps

    config = DecoderConfig.from_json(args.config) if args.config else DecoderConfig()
    config = config.with_overrides(
        confidence_threshold=args.confidence_threshold,
        min_peaks_distance=args.min_peaks_distance,
        min_joints_number=args.min_joints_number,
        min_subset_score=args.min_subset_score,
    )

    heatmaps, pafs = _load_arrays(args.input, args.heatmaps_key, args.pafs_key)
    if args.upsample:
        heatmaps = upsample_feature_maps(heatmaps, config.upsample_ratio)
        pafs = upsample_feature_maps(pafs, config.upsample_ratio)

    poses = OpenPoseDecoder(config).decode(heatmaps, pafs)
    logger.info("Decoded %d poses from %s", len(poses), args.input)

    if args.rescale:
        poses = rescale_poses(
            poses,
            stride=config.stride,
            upsample_ratio=config.upsample_ratio,
            scale_x=args.scale_x,
            scale_y=args.scale_y,
        )

    result = {
        "input": str(args.input),
        "config": config.to_dict(),
        "poses": [pose.to_dict() for pose in poses],
    }
    text = json.dumps(result, indent=2)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        print(f"Saved {len(poses)} poses to {output}")
    else:
        print(text)


def _cmd_topology(args: argparse.Namespace) -> None:
    """Handle ``pafpose topology``."""
    from pafpose.topology import LimbTopology

    topology = LimbTopology.coco18()
    for limb_type, limb in enumerate(topology):
        x_ch, y_ch = limb.paf_channels
        print(
            f"  {limb_type:2d}  {topology.name_of(limb.keypoint_a):>15s} -> "
            f"{topology.name_of(limb.keypoint_b):<15s}  paf=({x_ch}, {y_ch})"
        )


def main(argv=None):
    """Entry point for ``pafpose`` CLI."""
    from pafpose.errors import DecoderError

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG)

    try:
        if args.command == "decode":
            _cmd_decode(args)
        elif args.command == "topology":
            _cmd_topology(args)
    except (DecoderError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
