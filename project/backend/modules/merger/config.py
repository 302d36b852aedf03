"""
Merger configuration.

Constants for the atempo decomposition, workspace file names and ffmpeg
stream selection. Deployment-specific knobs live in shared.config.
"""

# ffmpeg's atempo filter only accepts factors in [0.5, 2.0]
ATEMPO_MIN = 0.5
ATEMPO_MAX = 2.0
ATEMPO_EPSILON = 1e-9  # Boundary jitter tolerance at exactly 0.5 / 2.0
ATEMPO_PRECISION = 6  # Decimal digits kept on the final (remainder) factor

IDENTITY_RATIO = 1.0

# Workspace layout
INPUT_VIDEO_STEM = "input-video"
INPUT_AUDIO_STEM = "input-audio"
OUTPUT_FILENAME = "output.mp4"

# Stream selection: video from the first input, audio from the second
VIDEO_STREAM_MAP = "0:v:0"
AUDIO_STREAM_MAP = "1:a:0"

# Output validation
MIN_OUTPUT_SIZE_BYTES = 1
