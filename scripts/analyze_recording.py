"""
Analyze a guitar recording frame by frame.

Runs the pitch detector and tuner engine over a WAV file the way the live
tuner would see it (fixed-size frames) and prints what it finds.

Usage:
    python scripts/analyze_recording.py recording.wav
    python scripts/analyze_recording.py recording.wav --frame-size 8192 --plot out.png
    python scripts/analyze_recording.py recording.wav --json report.json --verbose
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import numpy as np

from guitar_tuner.constants import BUFFER_SIZE
from guitar_tuner.recording import RecordingReport, analyze_file

logger = logging.getLogger(__name__)


def print_frames(report: RecordingReport) -> None:
    """Print one line per frame."""
    print(f"{'Frame':<7} {'Time(s)':<9} {'Freq(Hz)':<10} {'Note':<5} {'Cents':<7} {'Conf':<6} {'State':<8}")
    print("-" * 60)
    for frame in report.frames:
        a = frame.analysis
        if a is None:
            print(f"{frame.index:<7} {frame.time:<9.3f} {'-':<10}")
            continue
        print(
            f"{frame.index:<7} {frame.time:<9.3f} {a.frequency:<10.2f} {a.note:<5} "
            f"{a.cents:<+7d} {a.confidence:<6.2f} {a.tuning_state.value:<8}"
        )


def print_summary(report: RecordingReport) -> None:
    """Print per-string summary."""
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Frames: {len(report.frames)}  detected: {len(report.detected)} "
          f"({report.detection_rate:.0%})")
    for note, count in sorted(report.note_counts().items()):
        median = report.median_frequency(note)
        print(f"  {note:<4} {count:>5} frames  median {median:.2f} Hz")


def save_json(report: RecordingReport, path: Path) -> None:
    data = {
        "timestamp": datetime.now().isoformat(),
        "sample_rate": report.sample_rate,
        "detection_rate": report.detection_rate,
        "notes": report.note_counts(),
        "frames": [
            {
                "index": f.index,
                "time": f.time,
                "frequency": f.analysis.frequency if f.analysis else None,
                "note": f.analysis.note if f.analysis else None,
                "cents": f.analysis.cents if f.analysis else None,
                "confidence": f.analysis.confidence if f.analysis else None,
            }
            for f in report.frames
        ],
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Saved: {path}")


def plot_report(report: RecordingReport, path: Path, title: str) -> None:
    """Plot detected frequency and cents over time."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    detected = report.detected
    times = np.array([f.time for f in detected])
    freqs = np.array([f.analysis.frequency for f in detected])
    cents = np.array([f.analysis.cents for f in detected])

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(times, freqs, "b.", markersize=4)
    ax1.set_ylabel("Frequency (Hz)")
    ax1.set_title(title)
    ax1.grid(True, alpha=0.3)

    ax2.plot(times, cents, "r.", markersize=4)
    ax2.axhspan(-5, 5, color="green", alpha=0.15, label="In tune (±5¢)")
    ax2.set_ylim(-50, 50)
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Cents")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(path, dpi=100)
    plt.close(fig)
    print(f"Saved: {path}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Analyze a guitar recording frame by frame")
    parser.add_argument("wav", type=Path, help="WAV file to analyze")
    parser.add_argument("--frame-size", type=int, default=BUFFER_SIZE, help="Samples per frame")
    parser.add_argument("--hop", type=int, default=None, help="Samples between frames (default: frame size)")
    parser.add_argument("--plot", type=Path, default=None, help="Save a frequency/cents plot here")
    parser.add_argument("--json", type=Path, default=None, help="Save a JSON report here")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    parser.add_argument("--verbose", action="store_true", help="Log every decision")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.wav.exists():
        logger.error("File not found: %s", args.wav)
        return 1

    report = analyze_file(args.wav, frame_size=args.frame_size, hop_size=args.hop)

    if not args.quiet:
        print_frames(report)
    print_summary(report)

    if args.json is not None:
        save_json(report, args.json)
    if args.plot is not None:
        if report.detected:
            plot_report(report, args.plot, args.wav.name)
        else:
            logger.warning("Nothing detected, skipping plot")

    return 0


if __name__ == "__main__":
    sys.exit(main())
