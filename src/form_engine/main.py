import argparse
import json
import logging
import sys
import traceback

from form_engine.exercise_analysis.base_analyzer import ExerciseType
from form_engine.session import analyze_recording, build_upload_payload, load_recording, resample_frames


def main(argv=None):
    """Analyze a recorded landmark stream and report reps and form."""
    parser = argparse.ArgumentParser(description="Geometric exercise form analysis - recorded session mode")
    parser.add_argument(
        "--landmarks",
        type=str,
        required=True,
        help="Path to the recorded landmark JSON file"
    )
    parser.add_argument(
        "--exercise",
        type=str,
        default=None,
        choices=[exercise.value for exercise in ExerciseType],
        help="Exercise to analyze (default: from the recording, else Auto-Detect)"
    )
    parser.add_argument(
        "--interval-ms",
        type=float,
        default=None,
        help="Analyze one frame per interval, e.g. 333 for ~3fps"
    )
    parser.add_argument(
        "--rotate",
        action="store_true",
        help="Rotate portrait-sensor landmarks before analysis"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the upload payload as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args(argv)

    if args.verbose:
        for name in ("GeometricRuleEngine", "ExerciseClassifier", "SessionReplay"):
            logging.getLogger(name).setLevel(logging.DEBUG)

    try:
        recording = load_recording(args.landmarks)
        frames = recording["frames"]
        if args.interval_ms:
            frames = resample_frames(frames, args.interval_ms)

        exercise = args.exercise or recording["exercise"] or ExerciseType.AUTO_DETECT
        summary = analyze_recording(frames, exercise=exercise, rotate=args.rotate)
    except Exception as e:
        print(f"Error analyzing recording: {e}")
        traceback.print_exc()
        return 1

    if args.json:
        print(json.dumps(build_upload_payload(summary), indent=2))
        return 0

    detected = summary.detected_exercise.value if summary.detected_exercise else "none"
    print(f"Exercise:        {summary.exercise.value}")
    print(f"Detected:        {detected}")
    print(f"Reps:            {summary.final_rep_count}")
    print(f"Average score:   {summary.average_score}")
    print(f"Frames analyzed: {summary.frames_analyzed} ({summary.frames_without_pose} without pose)")
    for i, ts in enumerate(summary.rep_timestamps, start=1):
        print(f"  Rep {i}: {ts.start:.0f}ms -> {ts.mid:.0f}ms -> {ts.end:.0f}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
