"""Numeric constants shared by the grading kernels and value objects."""

# Rec. 601 luma weights used by the saturation step
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

# Skin mask
SKIN_REFERENCE_HUE = 0.06  # ~21.6 degrees, normalized hue units
SKIN_MAX_RANGE = 0.15  # widest hue window at skinDetectionRange=100 (~54 degrees)
SKIN_HUE_BAND = 60.0 / 360.0  # skinHue slider maps onto 0-60 degrees
SKIN_SAT_CENTER = 0.4
SKIN_SAT_SPREAD = 0.4
SKIN_LUM_CENTER = 0.5
SKIN_LUM_SPREAD = 0.45
SKIN_MASK_THRESHOLD = 0.05
SKIN_NEUTRAL_HUE = 50.0

# Interactive history
HISTORY_LIMIT = 50

# LUT ids: 9 base-36 characters
LUT_ID_LENGTH = 9

# Exposure exponent (stops) is clipped here; 2**1000 * 255 is still finite
# and saturates every non-black channel
EXPOSURE_MAX_STOPS = 1000.0

# Largest LUT_3D_SIZE whose sample offsets fit an int64 index
LUT_MAX_SIZE = 1 << 20
