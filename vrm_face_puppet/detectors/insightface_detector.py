"""InsightFace detector wrapper for 68-point landmarks with HSEmotion expression scores."""

from typing import Any, Dict, List, Optional, Tuple
import cv2
import numpy as np

from ..core.base_detector import BaseDetector
from ..core.constants import (
    DETECTOR_INPUT_SIZE,
    DETECTOR_SCORE_THRESHOLD,
    EXPRESSION_MODEL_NAME,
    INSIGHTFACE_MODEL_PACK,
    NUM_LANDMARKS,
)
from ..core.types import FaceResult


class InsightFaceDetector(BaseDetector):
    """
    Face detector built from three sub-models:
    - fast face detector (InsightFace SCRFD "detection" module)
    - 68-point landmark model (InsightFace "landmark_3d_68" module)
    - expression classifier (HSEmotion, 8 emotions)

    Detection is not possible until load() has prepared all three.
    """

    # HSEmotion emotion labels (8 classes)
    EMOTIONS = [
        "Anger",
        "Contempt",
        "Disgust",
        "Fear",
        "Happiness",
        "Neutral",
        "Sadness",
        "Surprise",
    ]

    # Mapping from HSEmotion names to our expression names
    EMOTION_MAP = {
        "Anger": "angry",
        "Contempt": "contempt",
        "Disgust": "disgusted",
        "Fear": "fearful",
        "Happiness": "happy",
        "Neutral": "neutral",
        "Sadness": "sad",
        "Surprise": "surprised",
    }

    def __init__(self,
                 input_size: int = DETECTOR_INPUT_SIZE,
                 score_threshold: float = DETECTOR_SCORE_THRESHOLD,
                 model_pack: str = INSIGHTFACE_MODEL_PACK,
                 expression_model: str = EXPRESSION_MODEL_NAME):
        """
        Initialize detector settings. Models are loaded by load().

        Args:
            input_size: Square detection input size
            score_threshold: Detection confidence threshold
            model_pack: InsightFace model pack name
            expression_model: HSEmotion model name
        """
        self.det_size = (input_size, input_size)
        self.det_thresh = score_threshold
        self.model_pack = model_pack
        self.expression_model = expression_model

        self.app: Optional[Any] = None
        self.recognizer: Optional[Any] = None

    def load(self, weights_dir: str) -> None:
        """
        Load detector, landmark and expression models.

        Args:
            weights_dir: Root directory for InsightFace model packs
        """
        from insightface.app import FaceAnalysis
        from hsemotion_onnx.facial_emotions import HSEmotionRecognizer

        providers = ['CUDAExecutionProvider', 'CPUExecutionProvider']
        app = FaceAnalysis(name=self.model_pack, root=weights_dir, providers=providers,
                           allowed_modules=['detection', 'landmark_3d_68'])
        app.prepare(ctx_id=0, det_size=self.det_size, det_thresh=self.det_thresh)
        print(f"Loaded face detector and landmark model ({self.model_pack})")

        recognizer = HSEmotionRecognizer(model_name=self.expression_model)
        print(f"Loaded expression model ({self.expression_model})")

        self.app = app
        self.recognizer = recognizer

    @property
    def is_loaded(self) -> bool:
        return self.app is not None and self.recognizer is not None

    def detect(self, image: np.ndarray) -> Optional[FaceResult]:
        """
        Detect the most confident face in a single image.

        Args:
            image: Input image as numpy array (BGR format, H x W x 3, uint8)

        Returns:
            Face result with 68 landmarks in pixels and expression scores,
            or None if no face detected
        """
        if not self.is_loaded:
            raise RuntimeError("Detector not loaded. Call load() first.")

        faces = self.app.get(image)
        if not faces:
            return None

        face = max(faces, key=lambda f: float(f.det_score))

        landmarks = getattr(face, 'landmark_3d_68', None)
        if landmarks is None or landmarks.shape[0] != NUM_LANDMARKS:
            print(f"Warning: Expected {NUM_LANDMARKS} landmarks, got {None if landmarks is None else landmarks.shape[0]}")
            return None

        bbox = tuple(float(v) for v in face.bbox[:4])
        return FaceResult(
            landmarks=self.postprocess_landmarks(landmarks),
            expressions=self._analyze_expressions(image, bbox),
            score=float(face.det_score),
            bbox=bbox,
        )

    def _analyze_expressions(self, image: np.ndarray, bbox: Tuple[float, float, float, float]) -> Dict[str, float]:
        """
        Classify the expression of a face crop.

        Args:
            image: BGR image (H, W, 3)
            bbox: Face box (x1, y1, x2, y2)

        Returns:
            Expression name -> probability
        """
        face_img = self._crop_face(image, bbox)
        if face_img.size == 0:
            return {}

        # HSEmotion expects RGB
        face_rgb = cv2.cvtColor(face_img, cv2.COLOR_BGR2RGB)
        _, scores = self.recognizer.predict_emotions(face_rgb, logits=False)
        return self._map_scores(scores)

    @staticmethod
    def _crop_face(image: np.ndarray, bbox: Tuple[float, float, float, float]) -> np.ndarray:
        x1, y1, x2, y2 = bbox
        # Expand bbox slightly for better recognition
        pad = int(max(x2 - x1, y2 - y1) * 0.1)
        left = max(0, int(x1) - pad)
        top = max(0, int(y1) - pad)
        right = min(image.shape[1], int(x2) + pad)
        bottom = min(image.shape[0], int(y2) + pad)
        return image[top:bottom, left:right]

    def _map_scores(self, scores: List[float]) -> Dict[str, float]:
        expressions = {}
        for i, score in enumerate(scores):
            if i < len(self.EMOTIONS):
                name = self.EMOTIONS[i]
                expressions[self.EMOTION_MAP.get(name, name.lower())] = float(score)
        return expressions

    def close(self):
        """Release model references."""
        self.app = None
        self.recognizer = None
