import argparse
import json
import logging

from anonymisers.filters import DEFAULT_BLUR_RADIUS, TileMode
from pipeline.config import DETECTORS, SessionConfig
from pipeline.session import FaceBlurSession


def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        description="Real-time face blur along facial contours."
    )
    ap.add_argument("--source", default="0",
                    help="Camera index or video file (default: 0).")
    ap.add_argument("--output", default=None,
                    help="Write the anonymised video here instead of showing a window.")
    ap.add_argument("--detector", choices=DETECTORS, default="mediapipe")
    ap.add_argument("--weights", default="weights/pretrained_model.pt",
                    help="YOLO face weights (only with --detector yolo).")
    ap.add_argument("--blur-radius", type=float, default=DEFAULT_BLUR_RADIUS)
    ap.add_argument("--tile-mode", choices=[m.value for m in TileMode],
                    default=TileMode.REPEAT.value)
    ap.add_argument("--coarse", action="store_true",
                    help="Skip contour detection; blur bounding ellipses only.")
    ap.add_argument("--strict", action="store_true",
                    help="Leave faces without contours unblurred instead of using an ellipse.")
    ap.add_argument("--all-contours", action="store_true",
                    help="Trace every contour kind, not just face and cheeks.")
    ap.add_argument("--max-faces", type=int, default=5)
    ap.add_argument("--frame-budget-ms", type=float, default=33.0)
    ap.add_argument("--benchmark", type=int, default=0, metavar="N",
                    help="Measure latency over N frames of --source and print JSON.")
    ap.add_argument("--evaluate", action="store_true",
                    help="Measure residual contrast inside masks over --source.")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = int(args.source) if args.source.isdigit() else args.source
    session = FaceBlurSession.from_config(SessionConfig.from_args(args))

    try:
        if args.benchmark:
            from pipeline.benchmark_latency import benchmark_video_latency
            print(json.dumps(benchmark_video_latency(session, source, num_frames=args.benchmark), indent=4))
        elif args.evaluate:
            from pipeline.evaluate import evaluate_video
            print(json.dumps(evaluate_video(session, source), indent=4))
        elif args.output:
            from pipeline.runner import process_video
            process_video(session, source, args.output)
        else:
            from pipeline.runner import run_realtime
            run_realtime(session, source)
    finally:
        session.close()


if __name__ == "__main__":
    main()
