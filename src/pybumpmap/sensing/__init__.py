"""Sensing layer.

Turns raw accelerometer and gyroscope readings into a running bump score
that is flushed once per location tick.
"""
