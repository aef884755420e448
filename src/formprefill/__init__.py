"""
formprefill: prefill mapping for form-dependency graphs.

Classifies every form in a blueprint graph as a direct or transitive
predecessor of a target form and offers their fields, plus global
properties, as prefill sources for the target's inputs.
"""

__version__ = "0.1.0"
