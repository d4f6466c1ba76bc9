"""Threshold-gated, time-locked yield adapter between a pooled vault and one lending venue."""
