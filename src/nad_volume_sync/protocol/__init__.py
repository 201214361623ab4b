"""Protocol layer: frame codec, command builders, and response parsing."""

from .framing import Frame, build_frame, parse_frame, parse_frames
from .commands import OpCode, build_poll_volume, build_set_volume
from .parser import extract_volume, last_volume_frame
