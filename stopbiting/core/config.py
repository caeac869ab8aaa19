import argparse
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class MonitorConfig:
    # Sampling
    check_interval: float = 2.0        # seconds between pipeline attempts, >= 0.1
    face_timeout: float = 10.0         # reduced sampling window after losing the face
    keep_one_in: int = 4               # inside that window, process 1 frame in N

    # Detection
    fingertip_confidence: float = 0.3
    max_hands: int = 1

    # Snapshot
    snapshot_scale: float = 0.5
    snapshot_dir: Optional[str] = None

    # Camera
    camera_index: int = 0
    resolution: Tuple[int, int] = (640, 480)
    mirror: bool = False

    log_level: str = "INFO"

    def __post_init__(self):
        if self.face_timeout <= 0:
            raise ValueError(f"face_timeout must be positive, got {self.face_timeout}")
        if self.keep_one_in < 1:
            raise ValueError(f"keep_one_in must be at least 1, got {self.keep_one_in}")
        if not 0.0 <= self.fingertip_confidence <= 1.0:
            raise ValueError(f"fingertip_confidence must be in [0, 1], got {self.fingertip_confidence}")
        if self.max_hands < 1:
            raise ValueError(f"max_hands must be at least 1, got {self.max_hands}")
        if self.snapshot_scale <= 0:
            raise ValueError(f"snapshot_scale must be positive, got {self.snapshot_scale}")

    @classmethod
    def from_args(cls, argv: Optional[List[str]] = None) -> "MonitorConfig":
        parser = argparse.ArgumentParser(
            prog="stopbiting",
            description="Watch the camera and raise an alert when fingertips reach the mouth.",
        )
        parser.add_argument("--interval", type=float, default=cls.check_interval,
                            help="seconds between checks (min 0.1)")
        parser.add_argument("--camera", type=int, default=cls.camera_index, help="camera index")
        parser.add_argument("--width", type=int, default=640)
        parser.add_argument("--height", type=int, default=480)
        parser.add_argument("--mirror", action="store_true", help="flip frames horizontally")
        parser.add_argument("--face-timeout", type=float, default=cls.face_timeout,
                            help="seconds of reduced sampling after the face is lost")
        parser.add_argument("--snapshot-dir", default=None, help="save alert snapshots here")
        parser.add_argument("--log-level", default=cls.log_level,
                            choices=["DEBUG", "INFO", "WARNING", "ERROR"])
        args = parser.parse_args(argv)

        try:
            return cls(
                check_interval=args.interval,
                face_timeout=args.face_timeout,
                snapshot_dir=args.snapshot_dir,
                camera_index=args.camera,
                resolution=(args.width, args.height),
                mirror=args.mirror,
                log_level=args.log_level,
            )
        except ValueError as e:
            parser.error(str(e))
