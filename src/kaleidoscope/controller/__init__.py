"""
The CONTROLLER layer turns strokes into renderable geometry and runs the
per-frame simulation. It is Qt-free and can be driven headless.
"""
