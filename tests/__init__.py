"""Test package for the math walkthrough engine.

Core tests drive timelines, sequencers and sessions tick by tick with a
``FakeClock``, so no real time passes. The smoke tests run the pygame host
with the SDL dummy video/audio drivers. Run ``pytest`` from the project root.
"""
