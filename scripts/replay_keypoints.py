#!/usr/bin/env python3
"""
Replay recorded pose keypoints through the activity classifier.

Usage:
    python scripts/replay_keypoints.py recording.jsonl
    python scripts/replay_keypoints.py recording.jsonl --interval-ms 100 --json

Input: one JSON value per line, one line per video frame. Each line is either
    - a list of poses:  [{"score": 0.8, "keypoints": [{"name": "nose", "x": .., "y": .., "score": ..}, ...]}]
    - a single pose:    {"score": 0.8, "keypoints": [...]}
    - a bare frame:     {"nose": {"x": .., "y": .., "score": ..}, ...}   (treated as score 1.0)
Blank lines are frames with no detection.
"""

import argparse
import json
import logging
import os
import sys
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config
from services.activity_monitor import ActivityMonitor

logger = logging.getLogger("replay")


def parse_line(line):
    """Turn one recorded line into the list of poses for that frame."""
    line = line.strip()
    if not line:
        return []
    data = json.loads(line)
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and 'keypoints' in data:
        return [data]
    if isinstance(data, dict):
        return [{'score': 1.0, 'keypoints': data}]
    raise ValueError(f"unsupported record: {type(data).__name__}")


def load_poses(path):
    """Yield (line_number, poses) for every frame in a recording."""
    with open(path, 'r') as f:
        for number, line in enumerate(f, start=1):
            try:
                yield number, parse_line(line)
            except ValueError as e:
                logger.warning(f"Line {number}: skipping malformed record ({e})")
                yield number, []


def replay(path, interval_ms=0, as_json=False, out=None):
    """Classify every frame of a recording and print one label per frame."""
    out = out or sys.stdout
    monitor = ActivityMonitor(interval_ms=interval_ms)

    for number, poses in load_poses(path):
        label = monitor.process(poses)
        if as_json:
            out.write(json.dumps({'frame': number, 'activity': label.value}) + "\n")
        else:
            out.write(f"{number}\t{label.value}\n")
        if interval_ms:
            time.sleep(interval_ms / 1000.0)

    return monitor.get_stats()


def setup_logging():
    handlers = [logging.StreamHandler()]
    if Config.LOG_FILE:
        handlers.append(logging.FileHandler(Config.LOG_FILE))
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Replay recorded keypoints through the activity classifier")
    parser.add_argument('path', help="JSON-lines keypoint recording")
    parser.add_argument('--interval-ms', type=int, default=0,
                        help="delay between frames (0 = as fast as possible)")
    parser.add_argument('--json', action='store_true', help="emit one JSON object per frame")
    args = parser.parse_args(argv)

    setup_logging()

    if not os.path.isfile(args.path):
        logger.error(f"File not found: {args.path}")
        return 1

    stats = replay(args.path, interval_ms=args.interval_ms, as_json=args.json)
    logger.info(f"Replay finished: {stats}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
