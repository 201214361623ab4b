"""Two-way volume sync between an ALSA mixer and a NAD receiver.

Volume changes made on the local sound card are sent to the receiver over
its binary TCP control protocol, and changes reported by the receiver are
applied to the mixer.
"""

__version__ = "0.1.0"
