"""Constants and fixed configuration for the face puppet."""

import math

# iBUG 68-point landmark indices used by the signal extractor
LANDMARK_POINTS = {
    "upper_nose": 27,   # Top of the nose bridge
    "lower_nose": 30,   # Bottom of the nose bridge (tip)
    "upper_lip": 51,    # Upper lip center
    "lower_lip": 57,    # Lower lip center
}

NUM_LANDMARKS = 68

# Landmark groups of the 68-point layout, used for overlay colors
LANDMARK_INDICES = {
    "jaw": list(range(0, 17)),
    "right_eyebrow": list(range(17, 22)),
    "left_eyebrow": list(range(22, 27)),
    "nose": list(range(27, 36)),
    "right_eye": list(range(36, 42)),
    "left_eye": list(range(42, 48)),
    "mouth": list(range(48, 68)),
}

# Signal extraction
# Tuned while debugging; lower it for stiff facial muscles
SMILE_THRESHOLD = 0.1

# Animation mapping
SMILE_AMPLITUDE = 0.8
SMILE_RELEASE_THRESHOLD = 0.1
LIP_CLOSED_DIST = 30.0      # Lip distance with mouth closed (detector pixels)
LIP_OPEN_SPAN = 5.0         # Additional distance at full open (detector pixels)
HEAD_YAW_DEADBAND = 0.02    # radians
HEAD_YAW_GAIN = 2.5
HEAD_YAW_LIMIT = math.pi / 2
UPPER_ARM_ANGLE = math.pi / 3

# Render loop
RENDER_SKIP_INTERVAL = 3    # Skip drawing every third frame
DISPLAY_REFRESH_HZ = 60.0

# Debug keyboard override: key -> Joy weight
JOY_OVERRIDE_KEYS = {
    "w": 0.5,
    "e": 0.0,
}

# VRM humanoid bone names
BONE_HIPS = "hips"
BONE_HEAD = "head"
BONE_LEFT_UPPER_ARM = "leftUpperArm"
BONE_RIGHT_UPPER_ARM = "rightUpperArm"

# VRM 0.x blend shape preset names
BLEND_SHAPE_A = "a"         # Mouth open
BLEND_SHAPE_JOY = "joy"

# VRM 1.0 expression presets -> VRM 0.x blend shape preset names
VRM1_EXPRESSION_PRESETS = {
    "happy": "joy",
    "angry": "angry",
    "sad": "sorrow",
    "relaxed": "fun",
    "surprised": "surprised",
    "aa": "a",
    "ih": "i",
    "ou": "u",
    "ee": "e",
    "oh": "o",
    "blink": "blink",
    "blinkLeft": "blink_l",
    "blinkRight": "blink_r",
    "lookUp": "lookup",
    "lookDown": "lookdown",
    "lookLeft": "lookleft",
    "lookRight": "lookright",
    "neutral": "neutral",
}

# Face detector
DETECTOR_INPUT_SIZE = 224
DETECTOR_SCORE_THRESHOLD = 0.5
INSIGHTFACE_MODEL_PACK = "buffalo_l"
EXPRESSION_MODEL_NAME = "enet_b0_8_best_vgaf"

# Scene
CANVAS_SIZE = (1024, 768)
CLEAR_COLOR = 0xEEEEEE
CAMERA_FOV = 30.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 20.0
CAMERA_POSITION = (0.0, 1.35, 1.2)
LIGHT_POSITION = (0.0, 100.0, 30.0)
LIGHT_COLOR = 0xFFFFFF
GRID_SIZE = 10.0
GRID_DIVISIONS = 10
AXES_LENGTH = 5.0

# Webcam preview with landmark overlay
LANDMARK_DISPLAY_SIZE = (640, 480)

# Fixed relative asset paths
WEIGHTS_DIR = "./weights"
AVATAR_PATH = "./resource/three-vrm-girl.vrm"
CAMERA_DEVICE_INDEX = 0
