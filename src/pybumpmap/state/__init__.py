"""State layer.

Holds the bounded, insertion-ordered point store and the repaint
scheduler that is poked whenever the store grows.
"""
