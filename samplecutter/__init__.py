"""
samplecutter - Sample Extraction from Continuous Recordings

Cuts individual "samples" (instrument hits, notes) out of a long
multichannel WAV recording by following the amplitude envelope.

Processing Steps (per input file):
    A. Detect stream format (channels, sample rate, bit depth)
    B. Decode frames in blocks, feed them one at a time
    C. Half-wave peak detection on the zero-crossing channel
    D. Hysteresis: threshold-in starts a segment, threshold-out ends it
    E. Lead-in retention and trimming
    F. Write each segment as its own WAV

Invariants:
    - Frames are processed strictly in file order
    - Output sample values equal input sample values (no conversion)
    - Same input + same config = identical output files
"""

__version__ = "1.0.0"
