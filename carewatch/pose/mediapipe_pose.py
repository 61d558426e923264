from __future__ import annotations

from typing import List

import cv2
import mediapipe as mp
import numpy as np

from carewatch.common.schemas import Landmark


_POSE = mp.solutions.pose


class PoseEstimator:
    """MediaPipe Pose wrapper returning normalized landmarks for the full frame.

    MediaPipe Pose tracks a single person, so infer() returns a list holding
    zero or one 33-landmark sequence.
    """

    def __init__(self, model_complexity: int = 1, min_confidence: float = 0.5):
        self.pose = _POSE.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            enable_segmentation=False,
            min_detection_confidence=min_confidence,
            min_tracking_confidence=min_confidence,
        )

    def infer(self, frame_bgr: np.ndarray) -> List[List[Landmark]]:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        result = self.pose.process(rgb)
        if not result.pose_landmarks or not result.pose_landmarks.landmark:
            return []
        lm = result.pose_landmarks.landmark
        # mediapipe visibility is occasionally a hair outside [0, 1]
        pts = [
            Landmark(
                x=float(p.x),
                y=float(p.y),
                z=float(p.z),
                visibility=float(min(1.0, max(0.0, p.visibility))),
            )
            for p in lm
        ]
        return [pts]

    def close(self) -> None:
        self.pose.close()
