"""Pixel clock for small LED matrices.

A frame pipeline featuring:
- Rotating pages (weather, daylight, countdown, diagnostics, sensors)
- Background agents that keep forecast, network and sensor data fresh
- A paced, triple-buffered frame streamer feeding the matrix
"""

__version__ = "1.0.0"
