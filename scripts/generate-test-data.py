#!/usr/bin/env python3
"""
Generate sample audio files for Sawt testing.
"""
import os
import wave

import numpy as np

SAMPLE_RATE = 16000


def write_wav(samples, filename, sr=SAMPLE_RATE):
    """Write float samples in [-1, 1] as 16-bit mono PCM."""
    pcm = (np.clip(samples, -1, 1) * 32767).astype(np.int16)
    with wave.open(filename, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(pcm.tobytes())
    print(f"Created {filename} ({os.path.getsize(filename)} bytes)")


def create_natural_voice(seconds, filename):
    """Harmonic voice-like signal with pitch jitter and a noise floor."""
    rng = np.random.default_rng(7)
    n = int(SAMPLE_RATE * seconds)
    f0 = 120.0 * (1 + 0.01 * np.cumsum(rng.standard_normal(n) * 0.005))
    phase = 2 * np.pi * np.cumsum(f0 / SAMPLE_RATE)

    signal = np.zeros(n)
    for h in range(1, 6):
        signal += (1.0 / h) * np.sin(h * phase)
    signal += rng.standard_normal(n) * 0.02
    write_wav(signal / (np.max(np.abs(signal)) + 1e-10) * 0.7, filename)


def create_gapped_tts(bursts, filename):
    """Tone bursts separated by perfectly silent gaps."""
    t = np.arange(int(SAMPLE_RATE * 0.3)) / SAMPLE_RATE
    burst = 0.6 * np.sin(2 * np.pi * 220 * t)
    gap = np.zeros(int(SAMPLE_RATE * 0.2))
    write_wav(np.concatenate([burst, gap] * bursts), filename)


def create_flat_tone(seconds, filename):
    """Very quiet constant tone with almost no dynamic range."""
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    write_wav(0.0004 * np.sin(2 * np.pi * 440 * t), filename)


os.makedirs("test-data/audio", exist_ok=True)

print("Generating sample audio...")
print("=" * 50)

create_natural_voice(4, "test-data/audio/natural-voice.wav")
create_gapped_tts(8, "test-data/audio/gapped-tts.wav")
create_flat_tone(1, "test-data/audio/flat-tone.wav")

print("=" * 50)
print("✓ All sample audio created successfully!")
print("\nYou can now:")
print("  1. Inspect heuristics: sawt features test-data/audio/gapped-tts.wav")
print("  2. Score a file: sawt analyze test-data/audio/natural-voice.wav --json")
