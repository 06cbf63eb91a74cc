#!/usr/bin/env python3
"""
Grab one frame, triangulate it and compute RoPS descriptors for every point.
"""

import argparse
import logging
import sys
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional

from rops.data.cloud_source import CloudSource, make_cloud_source
from rops.feature_extraction import RoPSEstimator, DescriptorBatch, descriptor_labels
from rops.reconstruction.surface_reconstruction import reconstruct_mesh
from rops.utils.config import load_config
from rops.utils.logging_utils import setup_logging


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Compute RoPS descriptors for a captured point cloud.")
    parser.add_argument("--config", type=str, default=None, help="Path to the configuration file")
    parser.add_argument("--source", choices=["synthetic", "file"], default=None, help="Cloud source type")
    parser.add_argument("--input", type=str, default=None, help="Point cloud file for the file source")
    parser.add_argument("--output", type=str, default=None, help="Path of the .npz file to write descriptors to")
    parser.add_argument("--workers", type=int, default=None, help="Number of worker threads")
    return parser.parse_args(argv)


def save_descriptors(batch: DescriptorBatch, output_path: Path, labels: Optional[List[str]] = None) -> None:
    """Save descriptors, their query indices, every point status and the value labels."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    arrays = {
        'descriptors': batch.to_array(),
        'indices': batch.indices,
        'status': np.array([status.value for status in batch.statuses]),
    }
    if labels is not None:
        arrays['labels'] = np.array(labels)
    np.savez(output_path, **arrays)
    logging.info(f"Saved {len(batch.indices)} descriptors to {output_path}")


def run_pipeline(source: CloudSource, config: Dict) -> Optional[DescriptorBatch]:
    """
    Grab a frame from source and compute its descriptors; None if no frame is available.

    Raises:
        InvalidConfiguration: If the RoPS parameters are out of range; nothing is grabbed
    """
    estimator = RoPSEstimator(config['rops'])

    cloud = source.try_get_latest()
    if cloud is None:
        logging.error("Get cloud failed!")
        return None
    logging.info(f"Grabbed a frame of {len(cloud)} points")

    mesh, _ = reconstruct_mesh(cloud, config['reconstruction'])
    return estimator.compute(mesh)


def main(argv=None) -> int:
    """Main function."""
    args = parse_args(argv)
    config = load_config(args.config)

    # Override config with command line arguments
    if args.source is not None:
        config['source']['type'] = args.source
    if args.input is not None:
        config['source']['path'] = args.input
    if args.workers is not None:
        config['rops']['num_workers'] = args.workers

    setup_logging(config['logging'].get('level', 'INFO'), config['logging'].get('log_file'))

    source = make_cloud_source(config['source'])
    batch = run_pipeline(source, config)
    if batch is None:
        return 1

    if args.output is not None:
        save_descriptors(batch, Path(args.output), descriptor_labels(config['rops']['number_of_rotations']))
    return 0


if __name__ == "__main__":
    sys.exit(main())
