"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt) or the Visualization (PyVista).
It deals with points, strokes, drawing parameters and materials.
"""
