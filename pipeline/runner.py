import logging

import cv2

logger = logging.getLogger(__name__)


def run_realtime(session, source=0, window="Anonymised"):
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open {source}")

    logger.info("real-time loop starting, source=%s ('q' to quit)", source)
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            anon = session.process_frame(frame)

            cv2.imshow(window, anon)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break
    finally:
        cap.release()
        cv2.destroyAllWindows()
        logger.info("real-time loop stopped after %d frames", session.frames)


def process_video(session, input_path, output_path, fourcc="mp4v"):
    """
    Anonymise a whole video file. Returns the number of frames written.
    """
    cap = cv2.VideoCapture(input_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open {input_path}")

    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0

    out = cv2.VideoWriter(output_path, cv2.VideoWriter_fourcc(*fourcc), fps, (width, height))
    if not out.isOpened():
        cap.release()
        raise RuntimeError(f"Could not write {output_path}")

    written = 0
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break
            out.write(session.process_frame(frame))
            written += 1
    finally:
        cap.release()
        out.release()

    logger.info("wrote %d frames to %s", written, output_path)
    return written
