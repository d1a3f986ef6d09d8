"""Test package for the Letter Synesthesia Trainer.

Pure mapping/scheduling logic is tested directly; the pygame shell is
exercised headlessly using SDL's dummy video and audio drivers so no real
window or sound device is needed. Run ``pytest`` from the project root.
"""
