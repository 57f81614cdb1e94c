"""
Clip view: live waveform/spectrogram surface with playhead and transcript overlays.
"""
